"""
Listing payload cache.

Serves the hot unparameterized listing read path. Uses Redis when one is
configured and reachable, otherwise the process-local EphemeralCache.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .ephemeral_cache import EphemeralCache


logger = logging.getLogger(__name__)


class ListingCache:
    """Short-lived cache of serialized listing payloads"""

    def __init__(
        self,
        ttl_seconds: int = 30,
        redis_client: Optional[redis.Redis] = None,
        local: Optional[EphemeralCache] = None
    ):
        self.ttl_seconds = ttl_seconds
        self.redis_client = redis_client
        self.local = local or EphemeralCache()

    async def get(self, key: str) -> Optional[str]:
        """
        Look up a cached payload.

        Args:
            key: Cache key

        Returns:
            Cached JSON payload or None
        """
        if self.redis_client is not None:
            try:
                cached = await self.redis_client.get(key)
                if isinstance(cached, bytes):
                    cached = cached.decode("utf-8")
                return cached
            except RedisError as e:
                logger.warning(f"Redis read failed for {key}, using local cache: {e}")

        return self.local.get(key)

    async def set(self, key: str, payload: str, ttl_seconds: Optional[int] = None):
        """
        Cache a payload.

        Args:
            key: Cache key
            payload: Serialized JSON payload
            ttl_seconds: Override for the default TTL
        """
        ttl = ttl_seconds or self.ttl_seconds

        if self.redis_client is not None:
            try:
                await self.redis_client.setex(key, ttl, payload)
                return
            except RedisError as e:
                logger.warning(f"Redis write failed for {key}, using local cache: {e}")

        self.local.set(key, payload, ttl)
