"""
Bounded retry applied around a whole scheduled job, never inside a cycle.

The store client never retries, and a region's fetch failure is final for
that cycle: OrderMonitor reports it as a StoreCheckFailure. with_retries
only re-runs a job whose coroutine itself raised a transient error.

Retried:     TransportError, UpstreamError with a 5xx / 429 status
Not retried: ConfigError, any other UpstreamError (4xx won't fix itself)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from models.errors import TransportError, UpstreamError

logger = logging.getLogger("orderwatch.retry")

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, TransportError):
        return True
    if isinstance(exc, UpstreamError):
        return exc.status_code >= 500 or exc.status_code == 429
    return False


async def with_retries(
    fn: Callable[[], Awaitable[T]],
    attempts: int,
    delay_sec: float,
    label: str = "call",
) -> T:
    """
    Await fn(), retrying up to `attempts` extra times on retryable errors.
    Delay doubles after each failure. The last error is re-raised.
    """
    tries = 0
    delay = delay_sec
    while True:
        try:
            return await fn()
        except Exception as exc:
            if not is_retryable(exc) or tries >= attempts:
                raise
            tries += 1
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                label, tries, attempts + 1, delay, exc,
            )
            await asyncio.sleep(delay)
            delay *= 2
