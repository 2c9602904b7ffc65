"""Azure fetch-provider library.

This package fetches raw resource listings from Azure (through the az CLI or
a saved snapshot), validates them, normalizes them into Resource objects and
retries transient provider failures.
"""

from .errors import (
    SyncError,
    ErrorKind,
    ProviderError,
    ProviderTimeoutError,
    ProviderCommandError,
    ResponseValidationError,
)

__all__ = [
    "SyncError",
    "ErrorKind",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderCommandError",
    "ResponseValidationError",
]
