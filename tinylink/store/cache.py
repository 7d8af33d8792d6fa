"""Redis cache layer for link lookups."""

import json
import logging
from typing import Optional

import redis.asyncio as redis

from ..models import Link


class RedisCache:
    """Read-through cache of link records for the resolution path.

    The cache is best effort: every failure is logged and treated as a miss,
    so the store stays the source of truth.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default TTL for cached items
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if redis_url:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis."""
        if not self.enabled:
            return

        try:
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

    async def get_link(self, code: str) -> Optional[Link]:
        """Get a cached link record."""
        if not self.enabled or not self.client:
            return None

        try:
            raw = await self.client.get(self.get_cache_key(code))
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache get error: {e}")
            return None

        if not raw:
            return None
        try:
            return Link.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            self.logger.warning(f"Discarding unreadable cache entry for {code}: {e}")
            await self.invalidate(code)
            return None

    async def set_link(self, link: Link, ttl: Optional[int] = None) -> bool:
        """Cache a link record.

        Args:
            link: The link to cache
            ttl: Optional TTL override (seconds)

        Returns:
            True if successful
        """
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(
                self.get_cache_key(link.code),
                ttl or self.ttl_seconds,
                json.dumps(link.to_dict()),
            )
            return True
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def invalidate(self, *codes: str) -> bool:
        """Drop cached records for the given codes."""
        if not self.enabled or not self.client or not codes:
            return False

        try:
            result = await self.client.delete(*(self.get_cache_key(code) for code in codes))
            return result > 0
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        if not self.enabled or not self.client:
            return False
        try:
            return bool(await self.client.ping())
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache ping error: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, code: str) -> str:
        return f"tinylink:link:{code}"
