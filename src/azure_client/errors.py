"""Typed exception hierarchy for fetch-provider errors.

This module defines the root exception of the project and the errors raised
while talking to the cloud provider. Provider errors carry an enumerated
``kind`` so retry predicates can match on a tag instead of on message text.
"""

from enum import Enum
from typing import Optional


class SyncError(Exception):
    """Base exception for all azure-resource-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class ErrorKind(Enum):
    """Classification of a provider failure."""

    TIMEOUT = "timeout"
    THROTTLED = "throttled"
    SERVER_ERROR = "server-error"
    NOT_FOUND = "not-found"
    UNKNOWN = "unknown"


class ProviderError(SyncError):
    """Base exception for fetch-provider failures."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN):
        super().__init__(message)
        self.kind = kind


class ProviderTimeoutError(ProviderError):
    """Raised when a provider command exceeds its time budget."""

    def __init__(self, command: str, timeout: float):
        super().__init__(
            f"Command '{command}' timed out after {timeout}s",
            kind=ErrorKind.TIMEOUT,
        )
        self.command = command
        self.timeout = timeout


class ProviderCommandError(ProviderError):
    """Raised when a provider command exits with a non-zero status."""

    def __init__(
        self,
        command: str,
        returncode: int,
        stderr: str = "",
        kind: Optional[ErrorKind] = None,
    ):
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(
            f"Command '{command}' failed: {detail}",
            kind=kind if kind is not None else classify_message(stderr),
        )
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class ResponseValidationError(SyncError):
    """Raised when a provider response is malformed. Never retried."""

    def __init__(self, source: str, message: str):
        super().__init__(f"Invalid {source} response: {message}")
        self.source = source


_KIND_PATTERNS = (
    (ErrorKind.THROTTLED, ('429', 'too many requests', 'throttled', 'rate limit')),
    (ErrorKind.TIMEOUT, ('timed out', 'timeout', 'etimedout')),
    (ErrorKind.SERVER_ERROR, (
        '500', '502', '503', '504', 'econnrefused', 'enotfound',
        'socket hang up', 'connection refused', 'connection reset',
        'service unavailable', 'gateway',
    )),
    (ErrorKind.NOT_FOUND, ('404', 'not found', 'could not be found')),
)


def classify_message(message: str) -> ErrorKind:
    """Map provider error text onto an ErrorKind.

    Only used at the provider boundary, where the CLI gives us nothing but
    stderr text.
    """
    text = (message or "").lower()
    for kind, patterns in _KIND_PATTERNS:
        if any(pattern in text for pattern in patterns):
            return kind
    return ErrorKind.UNKNOWN
