"""Async Redis client lifecycle.

The client lives on ``app.state`` for request handlers; a module reference is
kept as well so the rate limiter can reach it from a plain dependency.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from bayplanner.core.config import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def init_redis(app_state: object) -> aioredis.Redis | None:
    """Connect to Redis and publish the client on ``app_state``.

    Returns None when Redis is unreachable; callers then fall back to
    in-process rate limiting instead of refusing to start.
    """
    global _client
    client = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Redis unavailable at %s: %s", settings.REDIS_URL, exc)
        await client.aclose()
        app_state.redis = None  # type: ignore[attr-defined]
        return None

    app_state.redis = client  # type: ignore[attr-defined]
    _client = client
    return client


async def close_redis(app_state: object) -> None:
    """Close the client stored on ``app_state`` and clear the module reference."""
    global _client
    client: aioredis.Redis | None = getattr(app_state, "redis", None)
    if client is not None:
        await client.aclose()
        app_state.redis = None  # type: ignore[attr-defined]
    _client = None


def get_redis() -> aioredis.Redis:
    """Return the live client or raise RuntimeError when none is connected."""
    if _client is None:
        raise RuntimeError("Redis client not initialized. Call init_redis() first.")
    return _client
