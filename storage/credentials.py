"""
Service-account credential loading.

Reads the JSON key file downloaded from the Google Cloud console and keeps
the three fields the signer needs. Everything else in the document is ignored.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from utils.errors import FileAccessError, ParseError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("private_key", "client_email", "project_id")


@dataclass(frozen=True, slots=True)
class ServiceAccountCredentials:
    """Identity, PEM key and project taken from a service-account document."""

    client_email: str
    private_key: str = field(repr=False)
    project_id: str

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ServiceAccountCredentials":
        """Build credentials from a decoded JSON object, checking its shape."""
        if not isinstance(payload, Mapping):
            raise ParseError(
                f"Credential document must be a JSON object, got {type(payload).__name__}"
            )

        values: dict[str, str] = {}
        for name in REQUIRED_FIELDS:
            value = payload.get(name)
            if not isinstance(value, str) or not value.strip():
                raise ParseError(f"Credential document field '{name}' is missing or empty")
            values[name] = value

        return cls(
            client_email=values["client_email"],
            private_key=values["private_key"],
            project_id=values["project_id"],
        )


def load_credentials(credentials_path: str | Path) -> ServiceAccountCredentials:
    """
    Read a service-account JSON file into a ServiceAccountCredentials record.

    Args:
        credentials_path: Path to the service-account key file

    Returns:
        ServiceAccountCredentials with the file's exact field values

    Raises:
        FileAccessError: If the file cannot be opened or read
        ParseError: If the content is not JSON of the expected shape
    """
    path = Path(credentials_path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise FileAccessError(f"Cannot read credential file {path}: {exc.strerror or exc}") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"Credential file {path} is not valid JSON: {exc}") from exc

    credentials = ServiceAccountCredentials.from_mapping(payload)
    logger.debug(
        "Loaded credentials from %s: client_email=%s, project=%s",
        path,
        credentials.client_email,
        credentials.project_id,
    )
    return credentials


__all__ = ["ServiceAccountCredentials", "load_credentials", "REQUIRED_FIELDS"]
