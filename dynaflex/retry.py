"""Retry an async operation with Fibonacci backoff.

The delay before retry n follows the Fibonacci sequence scaled by the initial
delay: d, d, 2d, 3d, 5d, 8d, ... The first waits grow slower than a doubling
schedule and the ratio between consecutive waits converges to the golden
ratio. There is no jitter and no cap on the delay.

Every failure is retried the same way. Callers that must not retry certain
errors (e.g. a malformed expression) should catch them inside the operation
or avoid the executor for that call.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterator
from datetime import timedelta
from typing import NamedTuple, TypeVar

from dynaflex.exceptions import InvalidRetryPolicyError
from dynaflex.observability import EventSink, StructlogSink

T = TypeVar("T")

Delay = float | timedelta


class RetryPolicy(NamedTuple):
    """Retry budget used by the client for every request it sends.

    Attributes:
        initial_delay: First backoff delay, in seconds or as a timedelta.
        max_retries: Number of retries after the first attempt.

    """

    initial_delay: Delay
    max_retries: int


def _seconds(delay: Delay) -> float:
    if isinstance(delay, timedelta):
        return delay.total_seconds()
    return float(delay)


def fibonacci_delays(initial_delay: Delay) -> Iterator[float]:
    """Yield the backoff schedule d, d, 2d, 3d, 5d, ... forever."""
    current = following = _seconds(initial_delay)
    while True:
        yield current
        current, following = following, current + following


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    initial_delay: Delay,
    max_retries: int,
    *,
    sink: EventSink | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the retry budget is spent.

    Args:
        operation: Zero-argument callable producing a fresh awaitable for each
            attempt.
        initial_delay: The first backoff delay.
        max_retries: Maximum number of retries; ``max_retries + 1`` attempts
            are made at most.
        sink: Receives one ``operation_retry`` event per retry.
        sleep: Coroutine used to wait between attempts.

    Returns:
        The result of the first successful attempt.

    Raises:
        InvalidRetryPolicyError: If ``max_retries`` or ``initial_delay`` is
            negative.
        Exception: The last error raised by ``operation`` once the budget is
            exhausted, unchanged.

    Example:
        table = await ddb.Table("products")
        response = await retry_with_backoff(
            lambda: table.get_item(Key=key),
            initial_delay=0.5,
            max_retries=3,
        )

    """
    if max_retries < 0:
        raise InvalidRetryPolicyError(f"max_retries must be >= 0, got {max_retries}")
    if _seconds(initial_delay) < 0:
        raise InvalidRetryPolicyError(f"initial_delay must be >= 0, got {initial_delay}")

    emit = sink if sink is not None else StructlogSink()
    delays = fibonacci_delays(initial_delay)
    retries = 0

    while True:
        try:
            return await operation()
        except Exception as error:
            if retries >= max_retries:
                raise
            delay = next(delays)
            retries += 1
            emit(
                "operation_retry",
                error=repr(error),
                delay=delay,
                attempt=retries,
                max_retries=max_retries,
            )
            await sleep(delay)


__all__ = [
    "RetryPolicy",
    "fibonacci_delays",
    "retry_with_backoff",
]
