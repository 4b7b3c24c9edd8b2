"""
Logging Configuration for the Transfer CLI

Progress messages for each completed stage are ordinary log records written
to stdout. Records are handed to a QueueHandler and written by a
QueueListener thread, so a slow terminal never sits inside a transfer.

Usage:
    from utils.logger_config import configure_logging, stop_logging

    # At startup (before any logging)
    configure_logging("DEBUG")

    # At shutdown (optional, atexit handles this automatically)
    stop_logging()
"""

import atexit
import logging
import logging.handlers
import os
import queue
import sys
from typing import Optional, TextIO

# Module-level reference to the listener for shutdown handling
_log_listener: Optional[logging.handlers.QueueListener] = None

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"

NOISY_LOGGERS = (
    "httpcore",
    "httpx",
    "urllib3",
    "google.auth",
    "google.auth.transport",
    "google.cloud",
)


def resolve_log_level(value: str | int | None) -> int:
    """Resolve log level from a level name, a number, or None (INFO)."""
    if value is None:
        return logging.INFO
    if isinstance(value, int):
        return value

    stripped = value.strip().upper()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if stripped in level_map:
        return level_map[stripped]

    try:
        return int(stripped)
    except ValueError:
        return logging.INFO


def configure_logging(
    level: str | int | None = None,
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    stream: TextIO | None = None,
    silence_noisy_libs: bool = True,
) -> logging.handlers.QueueListener:
    """
    Route the root logger through a queue to a stdout handler.

    Args:
        level: Log level name or number (default: LOG_LEVEL env var or INFO)
        log_format: Format string for log messages
        date_format: Format string for timestamps
        stream: Output stream for the handler (default: sys.stdout)
        silence_noisy_libs: If True, set HTTP and auth libraries to WARNING

    Returns:
        The started QueueListener
    """
    global _log_listener

    if _log_listener is not None:
        stop_logging()

    resolved = resolve_log_level(level if level is not None else os.getenv("LOG_LEVEL"))

    log_queue: queue.Queue = queue.Queue(-1)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))

    listener = logging.handlers.QueueListener(
        log_queue,
        console_handler,
        respect_handler_level=True,
    )
    listener.start()

    queue_handler = logging.handlers.QueueHandler(log_queue)
    queue_handler.setLevel(resolved)

    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers.clear()
    root.addHandler(queue_handler)

    if silence_noisy_libs:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    _log_listener = listener
    return listener


def stop_logging() -> None:
    """Flush queued records and stop the listener thread."""
    global _log_listener
    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None


def is_logging_configured() -> bool:
    return _log_listener is not None


atexit.register(stop_logging)
