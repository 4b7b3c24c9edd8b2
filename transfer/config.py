"""
Round-trip transfer configuration
=================================

Every path, the bucket and the URL lifetime live here instead of in
constants. Values come from the environment (a `.env` file is loaded by the
entry point) and can be overridden field by field from the command line.

USAGE:
    from transfer.config import TransferConfig
    config = TransferConfig.from_env()
    config = config.with_overrides(bucket_name="other-bucket")
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from storage.base import MAX_EXPIRATION_SECONDS
from utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRATION_SECONDS = 3600
DEFAULT_OBJECT_EXTENSION = ".bin"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_str(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    value = _env_str(env, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def _env_float(env: Mapping[str, str], name: str) -> Optional[float]:
    value = _env_str(env, name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def _env_bool(env: Mapping[str, str], name: str) -> Optional[bool]:
    value = _env_str(env, name)
    if value is None:
        return None
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class TransferConfig:
    """Settings for one upload-then-download run."""

    credentials_path: Path
    bucket_name: str
    upload_file_path: Path
    download_file_path: Path

    # -------------------------------------------------------------------------
    # expiration_seconds
    # -------------------------------------------------------------------------
    # Lifetime of each signed URL. V4 signing caps this at seven days.
    expiration_seconds: int = DEFAULT_EXPIRATION_SECONDS

    project_id: Optional[str] = None

    # Object names are "<prefix>/<uuid><extension>"; the extension defaults
    # to the upload file's suffix.
    object_prefix: str = ""
    object_extension: Optional[str] = None

    # None means block until the transfer finishes or the process is killed
    http_timeout_seconds: Optional[float] = None

    verify_checksum: bool = True
    delete_partial_download: bool = False

    def __post_init__(self) -> None:
        for name in ("credentials_path", "upload_file_path", "download_file_path"):
            value = getattr(self, name)
            if value is None or str(value).strip() == "":
                raise ConfigurationError(f"{name} is required")
            if not isinstance(value, Path):
                object.__setattr__(self, name, Path(value))

        if not self.bucket_name or not self.bucket_name.strip():
            raise ConfigurationError("bucket_name is required")
        object.__setattr__(self, "bucket_name", self.bucket_name.strip())

        if (
            isinstance(self.expiration_seconds, bool)
            or not isinstance(self.expiration_seconds, int)
            or not 0 < self.expiration_seconds <= MAX_EXPIRATION_SECONDS
        ):
            raise ConfigurationError(
                f"expiration_seconds must be between 1 and {MAX_EXPIRATION_SECONDS}, "
                f"got {self.expiration_seconds!r}"
            )

        if self.http_timeout_seconds is not None and self.http_timeout_seconds <= 0:
            raise ConfigurationError("http_timeout_seconds must be positive when set")

        if self.object_extension and not self.object_extension.startswith("."):
            object.__setattr__(self, "object_extension", f".{self.object_extension}")

        object.__setattr__(self, "object_prefix", (self.object_prefix or "").strip("/"))

    @property
    def resolved_extension(self) -> str:
        """Extension appended to generated object names."""
        if self.object_extension:
            return self.object_extension
        return self.upload_file_path.suffix or DEFAULT_OBJECT_EXTENSION

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides: Any) -> "TransferConfig":
        """
        Build a config from environment variables.

        Keyword overrides that are not None win over the environment; this is
        how CLI flags are layered on top.
        """
        env = os.environ if env is None else env
        values: dict[str, Any] = {
            "credentials_path": _env_str(env, "GCS_CREDENTIALS_JSON"),
            "bucket_name": _env_str(env, "GCS_BUCKET"),
            "project_id": _env_str(env, "GCS_PROJECT_ID"),
            "upload_file_path": _env_str(env, "UPLOAD_FILE_PATH"),
            "download_file_path": _env_str(env, "DOWNLOAD_FILE_PATH"),
            "expiration_seconds": _env_int(env, "SIGNED_URL_EXPIRATION_SECONDS"),
            "object_prefix": _env_str(env, "GCS_OBJECT_PREFIX"),
            "object_extension": _env_str(env, "OBJECT_EXTENSION"),
            "http_timeout_seconds": _env_float(env, "HTTP_TIMEOUT_SECONDS"),
            "verify_checksum": _env_bool(env, "VERIFY_CHECKSUM"),
            "delete_partial_download": _env_bool(env, "DELETE_PARTIAL_DOWNLOAD"),
        }

        known = {f.name for f in fields(cls)}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigurationError(f"Unknown configuration field: {key}")
            if value is not None:
                values[key] = value

        # Unset optional fields fall back to dataclass defaults
        kwargs = {key: value for key, value in values.items() if value is not None}
        for required in ("credentials_path", "bucket_name", "upload_file_path", "download_file_path"):
            kwargs.setdefault(required, None)

        config = cls(**kwargs)
        logger.debug("Transfer configuration loaded: %s", config.summary())
        return config

    def with_overrides(self, **overrides: Any) -> "TransferConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def summary(self) -> str:
        return (
            f"bucket={self.bucket_name}, credentials={self.credentials_path}, "
            f"upload={self.upload_file_path}, download={self.download_file_path}, "
            f"expiration={self.expiration_seconds}s, timeout={self.http_timeout_seconds}"
        )


__all__ = ["TransferConfig", "DEFAULT_EXPIRATION_SECONDS"]
