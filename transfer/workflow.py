"""
Upload-then-download round trip through signed URLs.

The workflow only talks to a URL signer and an object transfer, so the
storage backend and the HTTP layer can both be swapped out in tests.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from storage.base import HTTP_GET, HTTP_PUT, URLSigner
from transfer.base import ObjectTransfer, TransferResult, redact_url
from transfer.config import TransferConfig
from utils.errors import FileAccessError, IntegrityError

logger = logging.getLogger(__name__)

_HASH_CHUNK_SIZE = 1024 * 1024


def new_object_name(extension: str, prefix: str = "") -> str:
    """Random 128-bit object name, e.g. `uploads/3f1c...e9.jpeg`."""
    name = f"{uuid.uuid4()}{extension}"
    prefix = prefix.strip("/")
    return f"{prefix}/{name}" if prefix else name


def file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as exc:
        raise FileAccessError(f"Cannot read {path} for checksum: {exc.strerror or exc}") from exc
    return digest.hexdigest()


@dataclass(slots=True)
class RoundTripResult:
    object_name: str
    gs_url: str
    upload: TransferResult
    download: TransferResult
    checksum: Optional[str] = None


class RoundTripWorkflow:
    """Uploads one file under a fresh object name and downloads it again."""

    def __init__(
        self,
        config: TransferConfig,
        signer: URLSigner,
        transfer: ObjectTransfer,
        signing_identity: str,
    ) -> None:
        self.config = config
        self.signer = signer
        self.transfer = transfer
        self.signing_identity = signing_identity

    def _sign(self, object_name: str, method: str, signing_identity: Optional[str] = None) -> str:
        url = self.signer.generate_signed_url(
            self.config.bucket_name,
            object_name,
            method,
            self.config.expiration_seconds,
            signing_identity=signing_identity,
        )
        logger.info("%s URL: %s", "Upload" if method == HTTP_PUT else "Download", redact_url(url))
        logger.debug("%s URL (full): %s", method, url)
        return url

    def run(self, object_name: Optional[str] = None) -> RoundTripResult:
        """
        Execute the round trip.

        Args:
            object_name: Fixed object name; a random one is generated when omitted

        Returns:
            RoundTripResult describing both transfers

        Raises:
            SignedTransferError subclasses from the signer or the transfer
        """
        config = self.config
        object_name = object_name or new_object_name(config.resolved_extension, config.object_prefix)
        gs_url = f"gs://{config.bucket_name}/{object_name}"
        logger.info("Object name: %s", gs_url)

        upload_url = self._sign(object_name, HTTP_PUT, signing_identity=self.signing_identity)
        upload = self.transfer.upload(upload_url, config.upload_file_path)
        logger.info("Document uploaded successfully! %s (%d bytes)", object_name, upload.bytes_transferred)

        download_url = self._sign(object_name, HTTP_GET)
        try:
            download = self.transfer.download(download_url, config.download_file_path)
        except IntegrityError:
            self._discard_partial_download()
            raise
        logger.info(
            "Document downloaded successfully! %s -> %s (%d bytes)",
            object_name,
            config.download_file_path,
            download.bytes_transferred,
        )

        checksum = None
        if config.verify_checksum:
            checksum = self._verify_checksum()

        return RoundTripResult(
            object_name=object_name,
            gs_url=gs_url,
            upload=upload,
            download=download,
            checksum=checksum,
        )

    def _verify_checksum(self) -> str:
        uploaded = file_sha256(self.config.upload_file_path)
        downloaded = file_sha256(self.config.download_file_path)
        if uploaded != downloaded:
            self._discard_partial_download()
            raise IntegrityError(
                f"Downloaded content differs from upload: sha256 {downloaded} != {uploaded}"
            )
        logger.info("Checksum verified: sha256=%s", uploaded)
        return uploaded

    def _discard_partial_download(self) -> None:
        if not self.config.delete_partial_download:
            return
        path = self.config.download_file_path
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove partial download %s: %s", path, exc)
        else:
            logger.info("Removed partial download %s", path)


__all__ = ["RoundTripWorkflow", "RoundTripResult", "new_object_name", "file_sha256"]
