"""Redis read-through cache for short code resolution.

Links are immutable while the store lives, so a cached long URL only goes
stale when the store is reset; :meth:`RedisCache.clear` must run with every
reset. Entries otherwise only expire to bound memory.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError


class RedisCache:
    """Redis cache for short code -> long URL lookups."""

    KEY_PREFIX = "shortlink:code:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
        client: Optional[redis.Redis] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: TTL for cached entries
            logger: Optional logger instance
            client: Pre-built client (skips ``from_url``)
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.client = client
        self.enabled = redis_url is not None or client is not None

    async def connect(self) -> None:
        """Connect to Redis; on failure caching is disabled, not fatal."""
        if not self.enabled:
            return

        try:
            if self.client is None:
                self.client = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
            await self.client.ping()
            self.logger.info(f"Redis cache enabled with TTL={self.ttl_seconds}s")
        except (RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis, caching disabled: {e}")
            self.enabled = False

    async def get(self, short_code: str) -> Optional[str]:
        """Get the cached long URL for a short code.

        Returns:
            Cached long URL or None on miss or error
        """
        if not self.enabled or not self.client:
            return None

        try:
            return await self.client.get(self.get_cache_key(short_code))
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache get error: {e}")
            return None

    async def set(self, short_code: str, long_url: str) -> bool:
        """Cache the long URL for a short code.

        Returns:
            True if stored
        """
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(self.get_cache_key(short_code), self.ttl_seconds, long_url)
            return True
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def clear(self) -> bool:
        """Delete every cached short code.

        Returns:
            True if the namespace is empty afterwards (or caching is disabled)
        """
        if not self.enabled or not self.client:
            return True

        try:
            deleted = 0
            async for key in self.client.scan_iter(match=f"{self.KEY_PREFIX}*"):
                deleted += await self.client.delete(key)
            self.logger.info(f"Cleared {deleted} cached short codes")
            return True
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache clear error: {e}")
            return False

    async def health_check(self) -> bool:
        """Ping Redis; a disabled cache counts as healthy."""
        if not self.enabled or not self.client:
            return True
        try:
            await self.client.ping()
            return True
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, short_code: str) -> str:
        return f"{self.KEY_PREFIX}{short_code}"
