"""Redis cache layer for URL shortener."""

import json
import logging
from datetime import timedelta
from typing import Optional

import redis.asyncio as redis

from .base import URLCacheBase
from .models import ShortURL


class RedisCache(URLCacheBase):
    """Best-effort Redis cache for resolved URL mappings.

    Every failure is logged and reported as a miss (``None``) or ``False``;
    nothing raised by Redis reaches the caller. Entries expire through Redis
    TTLs only; there is no explicit invalidation.
    """

    KEY_PREFIX = "url:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            client: Pre-built client, used instead of ``redis_url``
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.client = client
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = client is not None or redis_url is not None

    async def connect(self) -> None:
        """Connect to Redis.

        A failed connection disables the cache instead of failing startup.
        """
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
            self.logger.info("Connected to Redis")
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    async def get_url(self, short_code: str) -> Optional[ShortURL]:
        """Get a cached mapping.

        Args:
            short_code: The short code to lookup

        Returns:
            Cached mapping, or None on absence or any error
        """
        if not self.enabled or not self.client:
            return None

        try:
            data = await self.client.get(self.get_cache_key(short_code))
        except (redis.RedisError, OSError) as e:
            self.logger.warning(f"Cache get error for {short_code}: {e}")
            return None

        if data is None:
            return None

        try:
            return ShortURL.from_dict(json.loads(data))
        except (ValueError, KeyError, TypeError) as e:
            self.logger.warning(f"Discarding malformed cache entry for {short_code}: {e}")
            return None

    async def set_url(self, url: ShortURL, ttl: timedelta) -> bool:
        """Cache a mapping.

        Args:
            url: Mapping to cache
            ttl: Time to live; must be at least one millisecond

        Returns:
            True if the value was written
        """
        if not self.enabled or not self.client:
            return False

        ttl_ms = int(ttl.total_seconds() * 1000)
        if ttl_ms <= 0:
            self.logger.debug(f"Skipping cache write for {url.short_code}: non-positive TTL")
            return False

        try:
            await self.client.psetex(
                self.get_cache_key(url.short_code),
                ttl_ms,
                json.dumps(url.to_dict()),
            )
            return True
        except (redis.RedisError, OSError) as e:
            self.logger.warning(f"Cache set error for {url.short_code}: {e}")
            return False

    async def health_check(self) -> bool:
        """Ping Redis; a disabled cache counts as healthy."""
        if not self.enabled or not self.client:
            return True

        try:
            return bool(await self.client.ping())
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, short_code: str) -> str:
        """Generate cache key for short code."""
        return f"{self.KEY_PREFIX}{short_code}"
