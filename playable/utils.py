"""Shared asyncio helpers."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, List, TypeVar

T = TypeVar("T")


async def gather_all(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """Wait for every awaitable; on the first failure cancel the rest and re-raise it.

    Results keep the order of ``awaitables``.
    """
    tasks = [asyncio.ensure_future(item) for item in awaitables]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def read_bytes(path) -> bytes:
    return await asyncio.to_thread(path.read_bytes)


__all__ = ["gather_all", "read_bytes"]
