"""
Cloud storage module.

Contains:
- credentials: Service-account key loading
- gcs: Google Cloud Storage client and URL signing
- base: URL signer capability and signing limits
"""

from storage.base import HTTP_GET, HTTP_PUT, MAX_EXPIRATION_SECONDS, URLSigner
from storage.credentials import ServiceAccountCredentials, load_credentials


def __getattr__(name):
    # storage.gcs pulls in the google SDK; only load it when the manager is asked for
    if name == "GCSStorageManager":
        from storage.gcs import GCSStorageManager
        return GCSStorageManager
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "GCSStorageManager",
    "ServiceAccountCredentials",
    "URLSigner",
    "HTTP_GET",
    "HTTP_PUT",
    "MAX_EXPIRATION_SECONDS",
    "load_credentials",
]
