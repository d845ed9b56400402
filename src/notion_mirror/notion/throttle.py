"""Flat-delay rate limiting for Notion API calls."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional


class RateLimiter:
    """Pause every caller for a fixed delay before it talks to the API.

    The delay is paid independently by each caller, so concurrent branches
    overlap their pauses. ``max_concurrency`` optionally caps how many
    requests may be in flight at once.
    """

    def __init__(self, delay_ms: int, *, max_concurrency: Optional[int] = None) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be non-negative")
        self.delay_ms = delay_ms
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    @property
    def delay(self) -> float:
        return self.delay_ms / 1000

    async def throttle(self) -> None:
        await asyncio.sleep(self.delay)

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Throttle, then hold a concurrency slot for the duration of one request."""

        if self._semaphore is None:
            await self.throttle()
            yield
            return
        async with self._semaphore:
            await self.throttle()
            yield
