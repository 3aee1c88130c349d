"""
Database connection management.
"""

import json
import logging
from typing import Optional

import asyncpg
import redis.asyncio as redis
from redis.exceptions import RedisError

from rental_search.config import CacheConfig, DatabaseConfig

logger = logging.getLogger(__name__)


async def _init_connection(conn: asyncpg.Connection):
    """Decode json/jsonb columns into Python objects"""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog"
        )


class Database:
    """Owns the PostgreSQL pool and the optional Redis client"""

    def __init__(self, config: DatabaseConfig, cache_config: CacheConfig):
        self.config = config
        self.cache_config = cache_config
        self.pg_pool: Optional[asyncpg.Pool] = None
        self.redis_client: Optional[redis.Redis] = None

    async def connect(self):
        """Initialize database connections"""
        try:
            self.pg_pool = await asyncpg.create_pool(
                self.config.url,
                min_size=self.config.pool_min_size,
                max_size=self.config.pool_max_size,
                init=_init_connection
            )
            logger.info("PostgreSQL connection pool created")
        except Exception as e:
            logger.error(f"Failed to connect to PostgreSQL: {e}")
            raise

        # Redis is optional; without it the listing cache stays process-local
        if not self.cache_config.redis_url:
            logger.info("REDIS_URL not set, using process-local listing cache")
            return

        try:
            self.redis_client = redis.from_url(self.cache_config.redis_url, decode_responses=True)
            await self.redis_client.ping()
            logger.info("Redis connection established")
        except (RedisError, OSError) as e:
            logger.warning(f"Redis unavailable, using process-local listing cache: {e}")
            self.redis_client = None

    async def close(self):
        """Close database connections"""
        if self.pg_pool:
            await self.pg_pool.close()
            self.pg_pool = None
            logger.info("PostgreSQL connection pool closed")

        if self.redis_client:
            await self.redis_client.close()
            self.redis_client = None
            logger.info("Redis connection closed")

    def get_pg_pool(self) -> asyncpg.Pool:
        """Get PostgreSQL connection pool"""
        if self.pg_pool is None:
            raise RuntimeError("Database not initialized")
        return self.pg_pool
