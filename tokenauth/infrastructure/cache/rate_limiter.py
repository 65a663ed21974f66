"""Fixed-window rate limiter for the auth endpoints."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from redis.exceptions import RedisError

from .redis_client import RedisClient

logger = logging.getLogger("tokenauth.ratelimit")


@dataclass
class _Window:
    started_at: float
    length: int
    count: int

    def expired(self, now: float) -> bool:
        return now - self.started_at >= self.length


class RateLimiter:
    """
    Counts requests per key in fixed windows.

    Counters live in Redis so every instance shares them; when Redis is
    unreachable the limiter keeps counting in process memory instead, and
    ended windows are swept from memory at most once per window length.
    Keys should include scope and identity, e.g. ``auth:login:1.2.3.4``.
    """

    def __init__(
        self,
        redis_client: Optional[RedisClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            redis_client: Shared Redis client, or None for memory only
            clock: Monotonic time source in seconds
        """
        self._redis = redis_client
        self._clock = clock
        self._memory: Dict[str, _Window] = {}
        self._last_sweep = clock()

    async def allow(self, key: str, *, limit: int, window_seconds: int) -> bool:
        """
        Record one hit for ``key`` and report whether it is within the limit.

        Args:
            key: Bucket key
            limit: Hits allowed per window
            window_seconds: Window length

        Returns:
            True if the request may proceed
        """
        if self._redis is not None:
            try:
                count = await self._redis.incr_with_expiry(
                    f"ratelimit:{key}", window_seconds
                )
                return count <= limit
            except RedisError as e:
                logger.warning("Redis limiter failed (%s); counting in process", e)

        return self._allow_in_memory(key, limit, window_seconds)

    def _allow_in_memory(self, key: str, limit: int, window_seconds: int) -> bool:
        now = self._clock()
        if now - self._last_sweep >= window_seconds:
            self._sweep(now)

        window = self._memory.get(key)
        if window is None or window.expired(now):
            window = _Window(started_at=now, length=window_seconds, count=0)
            self._memory[key] = window
        window.count += 1
        return window.count <= limit

    def _sweep(self, now: float) -> None:
        """Drop windows that have ended so idle keys do not accumulate."""
        stale = [key for key, window in self._memory.items() if window.expired(now)]
        for key in stale:
            del self._memory[key]
        self._last_sweep = now
