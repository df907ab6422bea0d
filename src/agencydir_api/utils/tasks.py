"""Request-scoped concurrency helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Run `aws` concurrently and return their results in order.

    Unlike a bare `asyncio.gather`, the first failure cancels the remaining
    awaitables and waits for them to unwind before it propagates, so no
    retries outlive the request that started them.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
