"""Transfer records and the object-transfer capability."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class TransferState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    COMPLETE = "complete"
    FAILED = "failed"


_ALLOWED_TRANSITIONS = {
    TransferState.IDLE: {TransferState.REQUESTING, TransferState.FAILED},
    TransferState.REQUESTING: {TransferState.STREAMING, TransferState.FAILED},
    TransferState.STREAMING: {TransferState.COMPLETE, TransferState.FAILED},
    TransferState.COMPLETE: set(),
    TransferState.FAILED: set(),
}


@dataclass(slots=True)
class TransferResult:
    """One upload or download and how far it got."""

    method: str
    local_path: Path
    state: TransferState = TransferState.IDLE
    bytes_transferred: int = 0
    status_code: Optional[int] = None
    content_length: Optional[int] = None

    def advance(self, state: TransferState) -> None:
        """Move to `state`; terminal states cannot be left."""

        if state not in _ALLOWED_TRANSITIONS[self.state]:
            raise ValueError(f"Illegal transfer transition {self.state.value} -> {state.value}")
        logger.debug("%s %s: %s -> %s", self.method, self.local_path, self.state.value, state.value)
        self.state = state

    def fail(self) -> None:
        if self.state not in (TransferState.COMPLETE, TransferState.FAILED):
            self.advance(TransferState.FAILED)

    @property
    def succeeded(self) -> bool:
        return self.state is TransferState.COMPLETE


def redact_url(url: str) -> str:
    """Drop the query string, which carries the signature of a signed URL."""

    base, _, query = str(url).partition("?")
    return f"{base}?<redacted>" if query else base


class ObjectTransfer(Protocol):
    """Moves bytes between local disk and a signed URL."""

    def upload(self, url: str, local_path: str | Path) -> TransferResult:
        ...

    def download(self, url: str, local_path: str | Path) -> TransferResult:
        ...
