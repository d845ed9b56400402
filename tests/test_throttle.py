"""Tests for the flat-delay rate limiter."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from notion_mirror.notion.throttle import RateLimiter


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_throttle_sleeps_configured_delay(self):
        limiter = RateLimiter(350)
        with patch("notion_mirror.notion.throttle.asyncio.sleep", new=AsyncMock()) as sleep:
            await limiter.throttle()
        sleep.assert_awaited_once_with(0.35)

    @pytest.mark.asyncio
    async def test_concurrent_callers_each_pay_the_delay(self):
        limiter = RateLimiter(350)
        with patch("notion_mirror.notion.throttle.asyncio.sleep", new=AsyncMock()) as sleep:
            await asyncio.gather(*(limiter.throttle() for _ in range(4)))
        assert sleep.await_count == 4

    def test_negative_delay_is_rejected(self):
        with pytest.raises(ValueError):
            RateLimiter(-1)

    @pytest.mark.asyncio
    async def test_slot_caps_requests_in_flight(self):
        limiter = RateLimiter(0, max_concurrency=2)
        active = 0
        peak = 0

        async def request():
            nonlocal active, peak
            async with limiter.slot():
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1

        await asyncio.gather(*(request() for _ in range(6)))

        assert peak == 2

    @pytest.mark.asyncio
    async def test_slot_without_cap_allows_full_fan_out(self):
        limiter = RateLimiter(0)
        active = 0
        peak = 0

        async def request():
            nonlocal active, peak
            async with limiter.slot():
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1

        await asyncio.gather(*(request() for _ in range(6)))

        assert peak == 6
