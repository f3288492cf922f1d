"""Async utilities for concurrent processing."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[Any]],
    batch_size: int = 5,
    pause_seconds: float = 0.0,
    stop_after: Optional[Callable[[List[Any]], bool]] = None,
) -> List[Any]:
    """Run `worker` over items in fixed-size waves.

    Every item of a batch is dispatched at once and the whole batch settles
    before the next one starts, so at most `batch_size` workers are in flight.
    Exceptions are captured in place of results rather than cancelling
    siblings.

    If `stop_after` returns True for a settled batch, later batches are
    not dispatched.

    Returns:
        One entry per dispatched item, in input order: the worker's result
        or the exception it raised.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results: List[Any] = []
    total_batches = (len(items) + batch_size - 1) // batch_size

    for batch_num, start in enumerate(range(0, len(items), batch_size), 1):
        batch = items[start : start + batch_size]
        logger.debug(f"Dispatching batch {batch_num}/{total_batches} ({len(batch)} items)")

        batch_results = await asyncio.gather(
            *[worker(item) for item in batch],
            return_exceptions=True,
        )
        results.extend(batch_results)

        if stop_after is not None and stop_after(batch_results):
            logger.debug(f"Stopping after batch {batch_num}/{total_batches}")
            break

        if pause_seconds > 0 and batch_num < total_batches:
            await asyncio.sleep(pause_seconds)

    return results
