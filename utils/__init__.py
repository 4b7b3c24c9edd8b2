"""
Shared utilities module.

Contains:
- logger_config: Queue-backed logging configuration
- errors: Error kinds and their process exit codes
"""

from utils.errors import (
    AuthenticationError,
    ConfigurationError,
    FileAccessError,
    IntegrityError,
    ParseError,
    SignedTransferError,
    SigningError,
    TransferError,
)
from utils.logger_config import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_LOG_FORMAT,
    configure_logging,
    is_logging_configured,
    stop_logging,
)

__all__ = [
    # Logger
    "configure_logging",
    "stop_logging",
    "is_logging_configured",
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_DATE_FORMAT",
    # Errors
    "SignedTransferError",
    "ConfigurationError",
    "FileAccessError",
    "ParseError",
    "AuthenticationError",
    "SigningError",
    "TransferError",
    "IntegrityError",
]
