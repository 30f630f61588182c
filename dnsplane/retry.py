"""Retry with exponential backoff for provider operations."""

import logging
from collections.abc import Callable
from typing import TypeVar

from dnsplane.context import Context
from dnsplane.errors import (
    NetworkError,
    OperationCancelled,
    RateLimitedError,
    RetryExhaustedError,
)
from dnsplane.models import DEFAULT_RETRY_CONFIG, RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_MESSAGES = (
    "timeout",
    "connection refused",
    "connection reset",
    "network is unreachable",
    "temporary failure",
    "server error",
    "rate limit",
    "too many requests",
)


def is_retryable(error: BaseException) -> bool:
    """Only network and rate-limit errors whose message names a transient cause are retried."""
    if not isinstance(error, (NetworkError, RateLimitedError)):
        return False
    message = str(error).lower()
    return any(pattern in message for pattern in RETRYABLE_MESSAGES)


def compute_delay(config: RetryConfig, attempt: int) -> float:
    """Delay before retry number ``attempt`` (1-based)."""
    delay = config.initial_delay * config.backoff_factor ** (attempt - 1)
    return min(config.max_delay, delay)


def retry(
    operation: Callable[[], T],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    ctx: Context | None = None,
) -> T:
    """Call ``operation`` up to ``max_retries + 1`` times.

    Non-retryable errors propagate immediately. Cancellation is checked
    before each attempt and each sleep; cancellation during a sleep raises
    OperationCancelled chained to the last error. When attempts run out,
    RetryExhaustedError wraps the last error.
    """
    ctx = ctx or Context.background()
    max_attempts = config.max_retries + 1
    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        if attempt > 1:
            delay = compute_delay(config, attempt - 1)
            logger.warning(
                "Attempt %d/%d failed (%s), retrying in %.2fs",
                attempt - 1, max_attempts, last_error, delay,
            )
            if ctx.done() or not ctx.sleep(delay):
                raise _cancelled(last_error) from last_error

        if ctx.done():
            raise _cancelled(last_error) from last_error

        try:
            return operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            last_error = e

    assert last_error is not None
    raise RetryExhaustedError(max_attempts, last_error) from last_error


def _cancelled(last_error: Exception | None) -> OperationCancelled:
    if last_error is None:
        return OperationCancelled("operation cancelled")
    return OperationCancelled(
        f"cancelled while retrying: {last_error}", last_error=last_error
    )
