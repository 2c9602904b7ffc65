"""Retry logic with exponential backoff for fetch-provider calls.

This module provides a generic retry helper used around every call to the
cloud provider. Delays grow exponentially (1s, 2s, 4s, ... capped at
``max_delay``) and a predicate decides which errors are worth retrying.
When attempts run out the last error is re-raised unchanged.
"""

import time
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .errors import ErrorKind, ProviderError, ResponseValidationError

logger = logging.getLogger(__name__)

T = TypeVar('T')

ShouldRetry = Callable[[BaseException, int], bool]
OnRetry = Callable[[BaseException, int, float], None]


def with_retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_multiplier: float = 2,
    max_delay: float = 30.0,
    should_retry: Optional[ShouldRetry] = None,
    on_retry: Optional[OnRetry] = None,
) -> T:
    """Call ``fn`` with exponential backoff between failed attempts.

    ``fn`` runs at most ``max_retries + 1`` times. After failed attempt k the
    wait is ``min(initial_delay * backoff_multiplier ** (k - 1), max_delay)``
    seconds.

    Args:
        fn: Zero-argument callable to execute
        max_retries: Retries after the first attempt
        initial_delay: Delay in seconds before the first retry
        backoff_multiplier: Factor applied to the delay after each retry
        max_delay: Upper bound on any single delay, in seconds
        should_retry: ``(error, attempt) -> bool`` gate; retries everything
            when omitted
        on_retry: ``(error, attempt, delay)`` hook fired before each sleep

    Returns:
        The return value of ``fn``

    Raises:
        Exception: The last error raised by ``fn``, unchanged

    Example:
        >>> subscription = with_retry(provider.get_subscription, max_retries=2)
    """
    attempt = 1
    while True:
        try:
            return fn()
        except Exception as e:
            if attempt > max_retries:
                logger.error(f"Giving up after {max_retries} retries: {e}")
                raise

            if should_retry is not None and not should_retry(e, attempt):
                logger.debug(f"Error is not retryable (attempt {attempt}): {e}")
                raise

            delay = min(initial_delay * backoff_multiplier ** (attempt - 1), max_delay)
            logger.warning(
                f"Attempt {attempt} failed, retrying in {delay}s "
                f"(retry {attempt}/{max_retries}): {e}"
            )
            if on_retry is not None:
                on_retry(e, attempt, delay)
            time.sleep(delay)
            attempt += 1


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings shared by every provider call.

    Attributes:
        max_retries: Retries after the first attempt
        initial_delay: Delay in seconds before the first retry
        backoff_multiplier: Growth factor of the delay
        max_delay: Cap on any single delay, in seconds
    """
    max_retries: int = 3
    initial_delay: float = 1.0
    backoff_multiplier: float = 2
    max_delay: float = 30.0

    def call(
        self,
        fn: Callable[[], T],
        should_retry: Optional[ShouldRetry] = None,
        on_retry: Optional[OnRetry] = None,
    ) -> T:
        """Run ``fn`` under this policy."""
        return with_retry(
            fn,
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            backoff_multiplier=self.backoff_multiplier,
            max_delay=self.max_delay,
            should_retry=should_retry,
            on_retry=on_retry,
        )


def as_decorator(
    policy: Optional[RetryPolicy] = None,
    should_retry: Optional[ShouldRetry] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator version of with_retry for use with @decorator syntax.

    Example:
        >>> @as_decorator(RetryPolicy(max_retries=2), is_transient_provider_error)
        ... def list_resources():
        ...     return provider.get_resources()
    """
    active = policy or RetryPolicy()

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return active.call(lambda: func(*args, **kwargs), should_retry=should_retry)

        return wrapper

    return decorator


# Predicates. All take (error, attempt) so they plug straight into
# should_retry.

_NETWORK_PATTERNS = (
    'econnrefused', 'enotfound', 'etimedout', 'econnreset',
    'socket hang up', 'network', 'connection refused', 'connection reset',
)

_TRANSIENT_PATTERNS = (
    'timeout', 'etimedout', 'econnrefused', 'enotfound', 'socket hang up',
    'rate limit', 'throttled', 'too many requests', '429', '503', '504',
)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

_TRANSIENT_KINDS = frozenset({ErrorKind.TIMEOUT, ErrorKind.THROTTLED, ErrorKind.SERVER_ERROR})


def is_network_error(error: BaseException, attempt: int = 0) -> bool:
    """True for connection-level failures (refused, DNS, reset, timeout)."""
    if isinstance(error, (ConnectionError, TimeoutError)):
        return True
    message = str(error).lower()
    return any(pattern in message for pattern in _NETWORK_PATTERNS)


def is_azure_transient_error(error: BaseException, attempt: int = 0) -> bool:
    """True when the error text looks like a transient provider failure.

    Substring heuristic: a message that merely mentions "timeout" or "429"
    in passing is classified as transient too.
    """
    message = str(error).lower()
    return any(pattern in message for pattern in _TRANSIENT_PATTERNS)


def is_retryable_http_error(error: BaseException, attempt: int = 0) -> bool:
    """True for HTTP 429/500/502/503/504 responses."""
    status = getattr(error, 'status_code', None)
    if status is None:
        response = getattr(error, 'response', None)
        status = getattr(response, 'status_code', None)
    return status in RETRYABLE_STATUS_CODES


def is_transient_provider_error(error: BaseException, attempt: int = 0) -> bool:
    """Retry predicate used around provider calls.

    Typed provider errors are matched on their ``kind``. Validation errors
    are never retried. Anything else falls back to the text heuristics.
    """
    if isinstance(error, ResponseValidationError):
        return False
    if isinstance(error, ProviderError):
        return error.kind in _TRANSIENT_KINDS
    return is_network_error(error) or is_azure_transient_error(error)


def any_of(*predicates: ShouldRetry) -> ShouldRetry:
    """Combine predicates: retry when any of them says so."""
    def combined(error: BaseException, attempt: int = 0) -> bool:
        return any(predicate(error, attempt) for predicate in predicates)
    return combined


def all_of(*predicates: ShouldRetry) -> ShouldRetry:
    """Combine predicates: retry only when all of them say so."""
    def combined(error: BaseException, attempt: int = 0) -> bool:
        return all(predicate(error, attempt) for predicate in predicates)
    return combined
