"""
Signed-URL transfer module.

Contains:
- executor: HTTP upload/download against signed URLs
- workflow: Upload-then-download round trip
- config: Run configuration
"""

from transfer.base import ObjectTransfer, TransferResult, TransferState
from transfer.config import TransferConfig
from transfer.executor import HttpTransferExecutor
from transfer.workflow import RoundTripResult, RoundTripWorkflow

__all__ = [
    "HttpTransferExecutor",
    "ObjectTransfer",
    "RoundTripResult",
    "RoundTripWorkflow",
    "TransferConfig",
    "TransferResult",
    "TransferState",
]
