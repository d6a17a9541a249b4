"""
Mistake Book Backend: Retry Wrapper for Store Writes
=====================================================

What:  Re-runs a failing store call a bounded number of times.
How:   Tenacity AsyncRetrying with:
         - stop after `max_attempts` attempts (default 2)
         - linear backoff: wait `backoff_seconds * attempt` before the next try
           (1s after the first failure, 2s after the second, ...)
         - no retry for 400/401/403/404, which signal caller or config errors
         - the last exception re-raised unchanged once attempts run out
       No jitter and no circuit breaker.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from mistakebook.exceptions import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

NON_RETRYABLE_STATUSES = frozenset({400, 401, 403, 404})


def is_retryable(exc: BaseException) -> bool:
    """Everything is retried except store errors with a non-retryable status."""
    if isinstance(exc, StoreError) and exc.status in NON_RETRYABLE_STATUSES:
        return False
    return isinstance(exc, Exception)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 2,
    backoff_seconds: float = 1.0,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Await `operation()` until it succeeds, fails permanently, or runs out of attempts.

    Args:
        operation:        Zero-argument callable returning an awaitable, called
                          and awaited once per attempt (a lambda works).
        max_attempts:     Total attempts including the first.
        backoff_seconds:  Linear backoff step in seconds.
        sleep:            Replacement for tenacity's async sleep (tests).

    Raises:
        Whatever the last attempt raised.
    """
    extra: Dict[str, Any] = {"sleep": sleep} if sleep else {}
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_incrementing(start=backoff_seconds, increment=backoff_seconds),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
        **extra,
    )
    async for attempt in retrying:
        with attempt:
            return await operation()
    raise AssertionError("unreachable: tenacity re-raises the last error")
