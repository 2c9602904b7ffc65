"""Resource store package.

Defines the store contract used by the orchestrator and a file-backed
implementation with an advisory run lock.
"""

from .base import ResourceStore, StoreStats
from .errors import (
    StoreError,
    StoreNotConnectedError,
    StoreOperationError,
    StoreLockError,
    HistoryWriteError,
)
from .yaml_store import FileResourceStore

__all__ = [
    "ResourceStore",
    "StoreStats",
    "FileResourceStore",
    "StoreError",
    "StoreNotConnectedError",
    "StoreOperationError",
    "StoreLockError",
    "HistoryWriteError",
]
