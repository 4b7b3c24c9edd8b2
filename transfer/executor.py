"""
HTTP transfers against signed URLs

Upload sends a local file as the body of a PUT; download streams the body
of a GET into a local file. Both are single blocking requests with no retry.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

import httpx

from storage.base import HTTP_GET, HTTP_PUT
from transfer.base import TransferResult, TransferState, redact_url
from utils.errors import FileAccessError, IntegrityError, SignedTransferError, TransferError

logger = logging.getLogger(__name__)

# GCS answers 200 for a signed PUT; other S3-style backends use 201 or 204
DEFAULT_UPLOAD_SUCCESS_STATUSES = frozenset({200, 201, 204})
DOWNLOAD_SUCCESS_STATUS = 200
_ERROR_BODY_EXCERPT = 200


def _declared_length(response: httpx.Response) -> Optional[int]:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring malformed Content-Length header: %r", raw)
        return None
    return value if value >= 0 else None


def _excerpt(response: httpx.Response) -> str:
    try:
        text = response.text
    except (httpx.HTTPError, UnicodeDecodeError):
        return ""
    return text.strip()[:_ERROR_BODY_EXCERPT]


class HttpTransferExecutor:
    """Runs uploads and downloads over one httpx client"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        success_statuses: Iterable[int] = DEFAULT_UPLOAD_SUCCESS_STATUSES,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            timeout: Per-operation network timeout in seconds; None waits forever
            success_statuses: Status codes that mark an upload as accepted
            transport: Alternative httpx transport (tests pass a MockTransport)
        """
        self.success_statuses = frozenset(success_statuses)
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            transport=transport,
            follow_redirects=False,
        )

    def __enter__(self) -> "HttpTransferExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def upload(self, url: str, local_path: str | Path) -> TransferResult:
        """
        PUT the contents of `local_path` to a signed URL

        Raises:
            FileAccessError: If the local file cannot be opened (no request is sent)
            TransferError: On a transport failure or an unaccepted status code
        """
        path = Path(local_path)
        result = TransferResult(method=HTTP_PUT, local_path=path)

        try:
            handle = path.open("rb")
        except OSError as exc:
            result.fail()
            raise FileAccessError(f"Cannot open upload file {path}: {exc.strerror or exc}") from exc

        with handle:
            size = os.fstat(handle.fileno()).st_size
            result.content_length = size
            result.advance(TransferState.REQUESTING)
            logger.debug("Uploading %s (%d bytes) to %s", path, size, redact_url(url))

            try:
                result.advance(TransferState.STREAMING)
                response = self._client.put(
                    url,
                    content=handle,
                    headers={"Content-Length": str(size)},
                )
            except httpx.HTTPError as exc:
                result.fail()
                raise TransferError(f"Upload of {path} failed: {exc}") from exc

        result.status_code = response.status_code
        if response.status_code not in self.success_statuses:
            result.fail()
            raise TransferError(
                f"Upload failed with status code {response.status_code}: {_excerpt(response)}",
                status_code=response.status_code,
            )

        result.bytes_transferred = size
        result.advance(TransferState.COMPLETE)
        logger.debug("Upload complete: %s (%d bytes, status %d)", path, size, response.status_code)
        return result

    def download(self, url: str, local_path: str | Path) -> TransferResult:
        """
        GET a signed URL and write the body to `local_path`

        The file is created or truncated. When the response declares a
        Content-Length, the number of bytes written must match it; on a
        mismatch the written file is left in place. A connection that closes
        before the declared length arrived counts as a mismatch.

        Raises:
            TransferError: On a transport failure or a non-200 status
            FileAccessError: If the local file cannot be written
            IntegrityError: If fewer or more bytes arrive than were declared
        """
        path = Path(local_path)
        result = TransferResult(method=HTTP_GET, local_path=path)
        result.advance(TransferState.REQUESTING)
        logger.debug("Downloading %s to %s", redact_url(url), path)

        try:
            with self._client.stream(
                HTTP_GET,
                url,
                headers={"Accept-Encoding": "identity"},
            ) as response:
                result.status_code = response.status_code
                if response.status_code != DOWNLOAD_SUCCESS_STATUS:
                    response.read()
                    raise TransferError(
                        f"Download failed with status code {response.status_code}: {_excerpt(response)}",
                        status_code=response.status_code,
                    )

                result.content_length = _declared_length(response)
                result.advance(TransferState.STREAMING)
                self._write_body(response, result)
        except httpx.RemoteProtocolError as exc:
            result.fail()
            if result.content_length is not None and result.bytes_transferred < result.content_length:
                raise IntegrityError(
                    f"Downloaded file size does not match declared size: connection closed after "
                    f"{result.bytes_transferred} of {result.content_length} bytes to {path}",
                    status_code=result.status_code,
                ) from exc
            raise TransferError(f"Download to {path} failed: {exc}") from exc
        except httpx.HTTPError as exc:
            result.fail()
            raise TransferError(f"Download to {path} failed: {exc}") from exc
        except SignedTransferError:
            result.fail()
            raise

        if result.content_length is None:
            logger.warning(
                "Response for %s declared no Content-Length; size check skipped", path
            )
        elif result.bytes_transferred != result.content_length:
            result.fail()
            raise IntegrityError(
                f"Downloaded file size does not match declared size: "
                f"wrote {result.bytes_transferred} of {result.content_length} bytes to {path}",
                status_code=result.status_code,
            )

        result.advance(TransferState.COMPLETE)
        logger.debug("Download complete: %s (%d bytes)", path, result.bytes_transferred)
        return result

    @staticmethod
    def _write_body(response: httpx.Response, result: TransferResult) -> None:
        # bytes_transferred is kept current so a dropped connection can report it
        path = result.local_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as handle:
                for chunk in response.iter_bytes():
                    handle.write(chunk)
                    result.bytes_transferred += len(chunk)
        except OSError as exc:
            raise FileAccessError(f"Cannot write download file {path}: {exc.strerror or exc}") from exc


__all__ = ["HttpTransferExecutor", "DEFAULT_UPLOAD_SUCCESS_STATUSES"]
