"""Retry utilities for async operations."""

import asyncio
from typing import Awaitable, Callable, Optional, Type, TypeVar

T = TypeVar("T")


def backoff_delay(attempt: int, base: float = 1.0, factor: float = 2.0) -> float:
    """Delay before retry number `attempt` (0-based): base * factor**attempt."""
    return base * factor**attempt


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    backoff_base: float = 1.0,
    backoff_factor: float = 2.0,
    retry_on: Type[Exception] | tuple[Type[Exception], ...] = Exception,
    should_retry: Optional[Callable[[Exception], bool]] = None,
    on_failure: Optional[Callable[[int, Exception], None]] = None,
) -> T:
    """Execute async function with exponential backoff retry.

    Args:
        fn: Zero-argument coroutine factory, called once per attempt
        max_attempts: Total attempts including the first
        backoff_base: Delay in seconds before the first retry
        backoff_factor: Multiplier applied per further retry
        retry_on: Exception types that count as a failed attempt
        should_retry: Predicate; returning False re-raises immediately
        on_failure: Called with (attempt_number, error) after each failure

    Raises:
        The last error once attempts are exhausted (not wrapped), so callers
        can still branch on its type.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Optional[Exception] = None
    for attempt in range(max_attempts):
        try:
            return await fn()
        except retry_on as e:
            last_error = e
            if on_failure is not None:
                on_failure(attempt + 1, e)
            if should_retry is not None and not should_retry(e):
                raise
            if attempt < max_attempts - 1:
                await asyncio.sleep(backoff_delay(attempt, backoff_base, backoff_factor))
    raise last_error
