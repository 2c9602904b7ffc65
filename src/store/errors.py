"""Typed exception hierarchy for resource store errors."""

from typing import Optional

from src.azure_client.errors import SyncError


class StoreError(SyncError):
    """Base exception for all resource store errors."""
    pass


class StoreNotConnectedError(StoreError):
    """Raised when the store is used before connect() or after close()."""

    def __init__(self, operation: str):
        super().__init__(f"Store is not connected (operation: {operation})")
        self.operation = operation


class StoreOperationError(StoreError):
    """Raised when a single store operation fails.

    Attributes:
        operation: Operation name (e.g., "upsert", "delete")
        key: Resource name or record id involved
        reason: Error description
    """

    def __init__(self, operation: str, key: str, reason: Optional[str] = None):
        message = f"Store operation '{operation}' failed for {key}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.operation = operation
        self.key = key
        self.reason = reason


class StoreLockError(StoreError):
    """Raised when the run lock cannot be acquired in time."""

    def __init__(self, path: str, timeout: float):
        super().__init__(
            f"Timeout acquiring store lock {path} after {timeout}s. "
            f"Another sync may be in progress."
        )
        self.path = path
        self.timeout = timeout


class HistoryWriteError(StoreError):
    """Raised when a run record cannot be appended to the history."""

    def __init__(self, history_id: str, reason: str):
        super().__init__(f"Cannot write sync history {history_id}: {reason}")
        self.history_id = history_id
        self.reason = reason
