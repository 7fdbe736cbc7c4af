# src/pipeline/concurrency.py - v1
"""Bounded fan-out for per-item oracle calls."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from plexweave.discovery.errors import DiscoveryCancelled

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: int = 1,
    cancel_event: asyncio.Event | None = None,
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    Results are returned in input order. The cancel event is checked before
    each call; once set, DiscoveryCancelled is raised and pending work is
    cancelled.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run(item: T) -> R:
        async with semaphore:
            if cancel_event is not None and cancel_event.is_set():
                raise DiscoveryCancelled()
            return await worker(item)

    tasks = [asyncio.ensure_future(run(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
