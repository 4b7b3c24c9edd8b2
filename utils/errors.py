"""Error kinds raised by the credential, signing and transfer layers."""

from __future__ import annotations


class SignedTransferError(RuntimeError):
    """Base class for every failure the round trip can report."""

    exit_code = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(SignedTransferError):
    """Raised when required settings are missing or out of range."""

    exit_code = 2


class FileAccessError(SignedTransferError):
    """Raised when a local file cannot be opened, read or written."""

    exit_code = 3


class ParseError(SignedTransferError):
    """Raised when a credential document is not the expected JSON shape."""

    exit_code = 4


class AuthenticationError(SignedTransferError):
    """Raised when the service-account key cannot be turned into credentials."""

    exit_code = 5


class SigningError(SignedTransferError):
    """Raised when a signed URL cannot be produced."""

    exit_code = 6


class TransferError(SignedTransferError):
    """Raised when an upload or download does not complete."""

    exit_code = 7

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message, exit_code=exit_code)
        self.status_code = status_code


class IntegrityError(TransferError):
    """Raised when transferred bytes do not match what was promised."""

    exit_code = 8


__all__ = [
    "SignedTransferError",
    "ConfigurationError",
    "FileAccessError",
    "ParseError",
    "AuthenticationError",
    "SigningError",
    "TransferError",
    "IntegrityError",
]
