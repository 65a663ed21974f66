"""Redis client used for shared rate-limit counters."""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from tokenauth.config import get_settings

logger = logging.getLogger("tokenauth.redis")


class RedisClient:
    """
    Thin async Redis wrapper.

    Connections are created lazily; every operation raises ``RedisError``
    when the server is unreachable so callers can decide how to degrade.
    """

    def __init__(self, redis_url: Optional[str] = None):
        """
        Initialize Redis client.

        Args:
            redis_url: Redis connection URL (defaults to settings)
        """
        self._redis: Optional[Redis] = None
        self._redis_url = redis_url or get_settings().redis_url

    async def connect(self) -> None:
        """Create the connection pool if it does not exist yet."""
        if self._redis is None:
            self._redis = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=20,
                socket_connect_timeout=1,
                socket_timeout=1,
            )

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def ping(self) -> bool:
        """
        Check Redis connectivity.

        Returns:
            True if Redis answered, False otherwise
        """
        await self.connect()
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    async def incr_with_expiry(self, key: str, ttl_seconds: int) -> int:
        """
        Increment a counter, setting its TTL when it is first created.

        Creation with expiry and the increment run in one MULTI block, so a
        counter never exists without a TTL.

        Args:
            key: Counter key
            ttl_seconds: Expiry applied to a new counter

        Returns:
            Counter value after increment

        Raises:
            RedisError: If Redis is unreachable
        """
        await self.connect()
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(key, 0, ex=ttl_seconds, nx=True)
            pipe.incr(key)
            _, count = await pipe.execute()
        return int(count)


_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """
    Get the process-wide Redis client.

    Returns:
        Shared RedisClient instance
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
