"""Tests for the fixed-window rate limiter."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tokenauth.infrastructure.cache.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


class TestInMemoryRateLimiter:
    """Rate limiting without Redis."""

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self, clock):
        limiter = RateLimiter(clock=clock)

        results = [
            await limiter.allow("auth:login:1.2.3.4", limit=5, window_seconds=60)
            for _ in range(6)
        ]

        assert results == [True] * 5 + [False]

    @pytest.mark.asyncio
    async def test_window_resets(self, clock):
        limiter = RateLimiter(clock=clock)
        for _ in range(5):
            await limiter.allow("key", limit=5, window_seconds=60)
        assert await limiter.allow("key", limit=5, window_seconds=60) is False

        clock.value += 60

        assert await limiter.allow("key", limit=5, window_seconds=60) is True

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, clock):
        limiter = RateLimiter(clock=clock)

        assert await limiter.allow("a", limit=1, window_seconds=60) is True
        assert await limiter.allow("a", limit=1, window_seconds=60) is False
        assert await limiter.allow("b", limit=1, window_seconds=60) is True

    @pytest.mark.asyncio
    async def test_ended_windows_are_dropped(self, clock):
        limiter = RateLimiter(clock=clock)
        for i in range(10_000):
            await limiter.allow(f"auth:login:10.0.{i // 256}.{i % 256}", limit=5, window_seconds=60)
        assert len(limiter._memory) == 10_000

        clock.value += 10_000
        await limiter.allow("auth:login:1.2.3.4", limit=5, window_seconds=60)

        assert list(limiter._memory) == ["auth:login:1.2.3.4"]

    @pytest.mark.asyncio
    async def test_sweep_keeps_live_windows(self, clock):
        limiter = RateLimiter(clock=clock)
        await limiter.allow("old", limit=1, window_seconds=60)
        clock.value += 30
        await limiter.allow("recent", limit=1, window_seconds=60)

        clock.value += 45
        await limiter.allow("other", limit=1, window_seconds=60)

        assert set(limiter._memory) == {"recent", "other"}
        assert await limiter.allow("recent", limit=1, window_seconds=60) is False


class TestRedisRateLimiter:
    """Rate limiting with shared counters."""

    @pytest.mark.asyncio
    async def test_uses_redis_counter(self):
        redis_client = AsyncMock()
        redis_client.incr_with_expiry.return_value = 6
        limiter = RateLimiter(redis_client)

        assert await limiter.allow("auth:login:ip", limit=5, window_seconds=60) is False
        redis_client.incr_with_expiry.assert_awaited_once_with("ratelimit:auth:login:ip", 60)

    @pytest.mark.asyncio
    async def test_falls_back_to_memory_when_redis_down(self, clock):
        redis_client = AsyncMock()
        redis_client.incr_with_expiry.side_effect = RedisConnectionError("refused")
        limiter = RateLimiter(redis_client, clock=clock)

        assert await limiter.allow("key", limit=1, window_seconds=60) is True
        assert await limiter.allow("key", limit=1, window_seconds=60) is False
