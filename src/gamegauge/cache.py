"""Redis connection pool shared by the rate limiter and health check.

Learn: Redis is optional infrastructure here. It only backs the rate
limit counters, so the app starts and serves requests without it;
callers ask for the pool and treat RuntimeError as "not available".
"""

from typing import Optional

import redis.asyncio as aioredis

from gamegauge.config import settings

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis(url: Optional[str] = None) -> aioredis.Redis:
    """Open the pool and ping once so a bad URL fails at startup."""
    global _redis
    _redis = aioredis.from_url(
        url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await _redis.ping()
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


def set_redis(client: Optional[aioredis.Redis]) -> None:
    """Install a client directly, e.g. an in-memory double in tests."""
    global _redis
    _redis = client


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
