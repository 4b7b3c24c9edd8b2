"""
Google Cloud Storage access for signed-URL transfers

Handles:
1. Authenticating from a service-account key file
2. Binding a storage client to one bucket
3. Generating V4 signed URLs for uploads (PUT) and downloads (GET)

Signing is a local computation over the service-account key; no request
reaches Google while a URL is produced.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from google.auth import exceptions as google_auth_exceptions
from google.cloud import storage
from google.oauth2 import service_account

from storage.base import HTTP_GET, HTTP_PUT, MAX_EXPIRATION_SECONDS, SUPPORTED_METHODS
from utils.errors import (
    AuthenticationError,
    ConfigurationError,
    FileAccessError,
    SigningError,
)

logger = logging.getLogger(__name__)

SIGNED_URL_VERSION = "v4"


class GCSStorageManager:
    """Signs object URLs for a single bucket using service-account credentials"""

    def __init__(
        self,
        bucket_name: str,
        credentials_path: str | Path,
        project_id: Optional[str] = None,
    ):
        """
        Initialize GCS Storage Manager

        Args:
            bucket_name: GCS bucket the manager is bound to
            credentials_path: Path to service account JSON
            project_id: GCP project ID (defaults to the key file's project)

        Raises:
            ConfigurationError: If no bucket name is given
            FileAccessError: If the key file cannot be opened
            AuthenticationError: If the key file cannot be turned into credentials
        """
        if not bucket_name or not bucket_name.strip():
            raise ConfigurationError("GCS bucket name not configured")

        self.bucket_name = bucket_name.strip()
        self.credentials_path = Path(credentials_path)

        try:
            self.credentials = service_account.Credentials.from_service_account_file(
                str(self.credentials_path)
            )
        except OSError as exc:
            raise FileAccessError(
                f"GCS credentials not readable at {self.credentials_path}: {exc.strerror or exc}"
            ) from exc
        except (ValueError, KeyError, google_auth_exceptions.GoogleAuthError) as exc:
            raise AuthenticationError(
                f"GCS credentials at {self.credentials_path} are not a usable service-account key: {exc}"
            ) from exc

        self.project_id = project_id or self.credentials.project_id
        self.client = storage.Client(
            credentials=self.credentials,
            project=self.project_id,
        )
        self.bucket = self.client.bucket(self.bucket_name)
        self._closed = False

        logger.info(
            "GCS Storage Manager initialized: bucket=%s, project=%s",
            self.bucket_name,
            self.project_id,
        )

    def __enter__(self) -> "GCSStorageManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def service_account_email(self) -> str:
        """Identity whose key signs every URL this manager produces"""
        return self.credentials.service_account_email

    def get_gs_url(self, object_name: str, bucket_name: Optional[str] = None) -> str:
        """Get gs:// URL for an object"""
        return f"gs://{bucket_name or self.bucket_name}/{object_name}"

    def generate_signed_url(
        self,
        bucket_name: str,
        object_name: str,
        method: str,
        expiration_seconds: int,
        signing_identity: Optional[str] = None,
    ) -> str:
        """
        Generate a V4 signed URL scoped to one method on one object

        Args:
            bucket_name: Bucket holding the object
            object_name: Object the URL grants access to
            method: HTTP method the URL authorises (PUT or GET)
            expiration_seconds: Lifetime of the URL, counted from now
            signing_identity: Service account email to sign as (required for PUT)

        Returns:
            The signed URL

        Raises:
            SigningError: If any input is invalid or the key cannot sign
        """
        if self._closed:
            raise SigningError("GCS Storage Manager is closed")

        method = (method or "").upper()
        if method not in SUPPORTED_METHODS:
            raise SigningError(f"Unsupported signed URL method: {method or '<empty>'}")

        if not object_name:
            raise SigningError("Object name is required to sign a URL")

        if (
            isinstance(expiration_seconds, bool)
            or not isinstance(expiration_seconds, int)
            or not 0 < expiration_seconds <= MAX_EXPIRATION_SECONDS
        ):
            raise SigningError(
                f"Expiration must be between 1 and {MAX_EXPIRATION_SECONDS} seconds, "
                f"got {expiration_seconds!r}"
            )

        if method == HTTP_PUT and not signing_identity:
            raise SigningError("Upload URLs require a signing identity")

        if signing_identity and signing_identity != self.service_account_email:
            raise SigningError(
                f"Signing identity {signing_identity} does not match key owner "
                f"{self.service_account_email}"
            )

        try:
            blob = self.client.bucket(bucket_name or self.bucket_name).blob(object_name)
            url = blob.generate_signed_url(
                version=SIGNED_URL_VERSION,
                expiration=timedelta(seconds=expiration_seconds),
                method=method,
                service_account_email=signing_identity,
                credentials=self.credentials,
            )
        except (
            ValueError,
            TypeError,
            AttributeError,
            google_auth_exceptions.GoogleAuthError,
        ) as exc:
            raise SigningError(f"Failed to sign {method} URL for {object_name}: {exc}") from exc

        logger.debug(
            "Generated %s signed URL for %s (expires in %d seconds)",
            method,
            self.get_gs_url(object_name, bucket_name),
            expiration_seconds,
        )
        return url

    def generate_upload_url(self, object_name: str, expiration_seconds: int) -> str:
        """Signed PUT URL on the bound bucket, signed as the key's own identity"""
        return self.generate_signed_url(
            self.bucket_name,
            object_name,
            HTTP_PUT,
            expiration_seconds,
            signing_identity=self.service_account_email,
        )

    def generate_download_url(self, object_name: str, expiration_seconds: int) -> str:
        """Signed GET URL on the bound bucket"""
        return self.generate_signed_url(
            self.bucket_name,
            object_name,
            HTTP_GET,
            expiration_seconds,
        )

    def close(self) -> None:
        """Release the underlying storage client; safe to call more than once"""
        if self._closed:
            return
        self._closed = True
        self.client.close()
        logger.debug("GCS Storage Manager closed: bucket=%s", self.bucket_name)


__all__ = ["GCSStorageManager"]
