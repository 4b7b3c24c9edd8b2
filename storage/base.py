"""URL signer capability: anything that can mint a signed URL for one object."""

from typing import Optional, Protocol

HTTP_PUT = "PUT"
HTTP_GET = "GET"
SUPPORTED_METHODS = frozenset({HTTP_PUT, HTTP_GET})

# V4 signatures cannot outlive seven days
MAX_EXPIRATION_SECONDS = 7 * 24 * 60 * 60


class URLSigner(Protocol):
    """Produces time-limited URLs scoped to a single method and object."""

    def generate_signed_url(
        self,
        bucket_name: str,
        object_name: str,
        method: str,
        expiration_seconds: int,
        signing_identity: Optional[str] = None,
    ) -> str:
        """Return a URL authorising `method` on `object_name` for `expiration_seconds`."""
        ...
