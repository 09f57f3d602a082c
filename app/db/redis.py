"""Redis connection and client management.

Redis backs the request rate limiter only; nothing else is cached there.
"""

import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.config import settings

logger = logging.getLogger(__name__)

# Global Redis client
redis_client: Optional[aioredis.Redis] = None


async def init_redis() -> None:
    """Initialize Redis connection.

    An unreachable server is logged and tolerated; the rate limiter then
    lets every request through.
    """
    global redis_client

    redis_client = aioredis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
    )
    try:
        await redis_client.ping()
    except RedisError as e:
        logger.warning("Redis unavailable at startup, rate limiting disabled: %s", e)


async def close_redis() -> None:
    """Close Redis connection."""
    global redis_client

    if redis_client:
        await redis_client.aclose()
        redis_client = None


def get_redis() -> aioredis.Redis:
    """Get Redis client instance."""
    if redis_client is None:
        raise RuntimeError("Redis is not initialized")
    return redis_client
