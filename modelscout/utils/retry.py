"""
Retry utilities for catalog requests.

Wraps a single async operation with a bounded number of attempts and
exponential backoff between failed attempts. The controller adds no error
type of its own: when attempts run out, the last error is re-raised unchanged.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def compute_backoff_delay(
    attempt: int,
    base_delay: float,
    exponential_base: float = 2.0,
    max_delay: float | None = None,
) -> float:
    """
    Delay to wait after the given (1-indexed) failed attempt.

    Examples:
        >>> compute_backoff_delay(1, 2.0)
        2.0
        >>> compute_backoff_delay(3, 2.0)
        8.0
        >>> compute_backoff_delay(3, 2.0, max_delay=5.0)
        5.0
    """
    delay = base_delay * (exponential_base ** (attempt - 1))
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 2.0,
    *,
    exponential_base: float = 2.0,
    max_delay: float | None = None,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str | None = None,
) -> T:
    """
    Run ``operation`` up to ``max_attempts`` times with exponential backoff.

    Between failed attempts (never after the final one) waits
    ``base_delay * exponential_base ** (attempt - 1)`` seconds.

    Args:
        operation: Zero-argument coroutine function to invoke
        max_attempts: Maximum number of attempts (default: 3)
        base_delay: Delay in seconds after the first failed attempt (default: 2.0s)
        exponential_base: Base for exponential backoff calculation (default: 2.0)
        max_delay: Optional cap on a single delay
        exceptions: Exception types that are retried; anything else propagates immediately
        sleep: Awaitable sleep function, injectable for tests
        label: Name used in log messages (defaults to the operation's name)

    Returns:
        The operation's result from the first successful attempt

    Raises:
        The last error raised by the operation once attempts are exhausted
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    name = label or getattr(operation, "__name__", "operation")
    last_exception: BaseException | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except exceptions as e:
            last_exception = e

            if attempt < max_attempts:
                delay = compute_backoff_delay(attempt, base_delay, exponential_base, max_delay)
                logger.warning(
                    f"{name} failed (attempt {attempt}/{max_attempts}): {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await sleep(delay)
            else:
                logger.warning(f"{name} failed after {max_attempts} attempts: {e}")

    # All retries exhausted, raise the last exception
    raise last_exception
