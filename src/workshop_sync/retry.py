from __future__ import annotations

"""
Retry/backoff utility for remote document store calls.

Callers wrap each read or write explicitly; the wrapper never triggers a
connection reset on its own. The last observed exception is re-raised
unchanged once the attempt budget is spent.
"""


import asyncio as _asyncio
import logging
import time as _time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

_ResultT = TypeVar("_ResultT")

asyncio = _asyncio  # Exposed for test monkeypatching of asyncio.sleep
time = _time

logger = logging.getLogger(__name__)

DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 1.0
DEFAULT_RETRY_MAX_DELAY = 10.0


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: the wait after attempt ``i`` (0-based) is ``min(base_delay * 2**i, max_delay)``."""

    max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    base_delay: float = DEFAULT_RETRY_BASE_DELAY
    max_delay: float = DEFAULT_RETRY_MAX_DELAY

    def delay_for(self, attempt_index: int) -> float:
        return min(self.base_delay * (2**attempt_index), self.max_delay)

    @classmethod
    def from_config(cls, config) -> "RetryPolicy":
        return cls(
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay_seconds,
            max_delay=config.retry_max_delay_seconds,
        )


@dataclass(frozen=True)
class RetryContext:
    """Metadata supplied to retry callbacks for one failed attempt."""

    attempt: int
    max_attempts: int
    delay: float
    exception: Exception
    started_at: float


RetryCallback = Callable[[RetryContext], Optional[Awaitable[None]]]


async def with_retry(
    operation: Callable[[], Awaitable[_ResultT]],
    max_attempts: Optional[int] = None,
    *,
    policy: Optional[RetryPolicy] = None,
    on_retry: Optional[RetryCallback] = None,
    context: str = "store operation",
) -> _ResultT:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` calls have failed.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt.
        max_attempts: Attempt budget; overrides ``policy.max_attempts`` when given.
        policy: Backoff timing; defaults to 1s base, 10s ceiling, 3 attempts.
        on_retry: Optional sync or async callback invoked before each backoff sleep.
        context: Label used in log messages.

    Returns:
        Whatever ``operation`` returns on its first successful attempt.

    Raises:
        ValueError: If the attempt budget is smaller than one.
        Exception: The exact exception raised by the final attempt.
    """
    policy = policy if policy is not None else RetryPolicy()
    attempts = max_attempts if max_attempts is not None else policy.max_attempts
    if attempts < 1:
        raise ValueError(f"max_attempts must be at least 1 (got {attempts})")

    for attempt_index in range(attempts):
        started_at = time.monotonic()
        try:
            return await operation()
        except Exception as exc:
            attempt = attempt_index + 1
            if attempt >= attempts:
                logger.error("%s failed after %s attempt(s): %s", context, attempt, exc)
                raise

            delay = policy.delay_for(attempt_index)
            retry_context = RetryContext(
                attempt=attempt,
                max_attempts=attempts,
                delay=delay,
                exception=exc,
                started_at=started_at,
            )
            if on_retry is not None:
                await _maybe_await(on_retry(retry_context))
            else:
                logger.warning(
                    "%s failed on attempt %s/%s; retrying in %.2fs (%s)",
                    context,
                    attempt,
                    attempts,
                    delay,
                    exc,
                )
            await asyncio.sleep(delay)

    raise RuntimeError(f"{context} failed: unexpected retry loop exit")


async def _maybe_await(result: Optional[Awaitable[None]]) -> None:
    if result is None:
        return
    await result


__all__ = [
    "RetryCallback",
    "RetryContext",
    "RetryPolicy",
    "with_retry",
]
