"""Health and readiness endpoints.

/health is liveness plus dependency status.  It always answers 200 and
reports impairment in the body: a restart would not fix an unreachable
Redis.  /ready answers 200 whenever the process can serve, since every
optional backend has an in-memory fallback.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from redis.exceptions import RedisError

from lms.db.engine import async_session_factory
from lms.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    checks: dict[str, str] = {}
    overall = "ok"

    if redis_pool is not None:
        try:
            await redis_pool.ping()  # type: ignore[misc]
            checks["redis"] = "ok"
        except RedisError:
            logger.warning("Health check: redis unreachable")
            checks["redis"] = "degraded"
            overall = "degraded"
    else:
        checks["redis"] = "not_configured"

    checks["database"] = "configured" if async_session_factory is not None else "in_memory"

    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
