"""Async utilities for fanning blocking per-file work out to threads."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Iterable, Sequence, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync_limited(
    semaphore: asyncio.Semaphore,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run a synchronous function in a thread pool, bounded by *semaphore*.

    Args:
        semaphore: Semaphore shared by all calls in one batch
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)
    """
    async with semaphore:
        return await asyncio.to_thread(func, *args, **kwargs)


async def gather_limited(
    coros: Sequence[Coroutine[Any, Any, T]],
) -> list[T]:
    """Run coroutines concurrently and return results in input order.

    Exceptions propagate from the first failure.

    Args:
        coros: Sequence of coroutines to run concurrently.

    Returns:
        List of results in the same order as input coroutines.
    """
    return list(await asyncio.gather(*coros))


async def map_limited(
    func: Callable[[Any], T],
    items: Iterable[Any],
    max_parallel: int,
) -> list[T]:
    """Apply a blocking *func* to every item on at most *max_parallel* threads.

    Args:
        func: Synchronous single-argument function
        items: Arguments, one call per item
        max_parallel: Upper bound on concurrently running calls (>= 1)

    Returns:
        List of results in the same order as *items*.
    """
    if max_parallel < 1:
        raise ValueError(
            f"max_parallel must be at least 1, got {max_parallel}"
        )
    semaphore = asyncio.Semaphore(max_parallel)
    items = list(items)
    logger.debug(
        "Dispatching %d calls with max_parallel=%d",
        len(items),
        max_parallel,
    )
    return await gather_limited(
        [run_sync_limited(semaphore, func, item) for item in items]
    )
