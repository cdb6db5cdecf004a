"""Redis connection management.

Same switch as engine.py: with REDIS_URL configured a shared client is
created at import time, otherwise `redis_pool` is None and the rate
limiter falls back to its in-memory implementation.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from lms.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Ping on startup, close the pool on shutdown.

    An unreachable Redis is logged but does not stop the app; /health
    reports it as degraded.
    """
    if redis_pool is None:
        logger.info("No REDIS_URL configured, rate limiting is in-memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected")
    except RedisError:
        logger.exception("Redis connection failed on startup")

    try:
        yield
    finally:
        await redis_pool.aclose()
        logger.info("Redis connection pool closed")
