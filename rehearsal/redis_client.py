"""Redis client backing the per-room booking locks."""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from rehearsal.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Shared client, created on first use
_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get Redis client instance."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def redis_is_healthy() -> bool:
    """Ping Redis; bookings cannot be taken while this is False."""
    client = await get_redis()
    try:
        return bool(await client.ping())
    except RedisError as e:
        logger.warning("Redis ping failed: %s", e)
        return False


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
