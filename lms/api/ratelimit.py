"""Rate limiting dependency for FastAPI routes.

A dependency rather than a middleware so only the routes that declare
it are limited; login and signup use it, everything else does not.

Keys use the most specific identity available: the `sub` of a session
cookie when one is present, the client IP otherwise.
"""

from __future__ import annotations

import logging

import jwt as pyjwt
from fastapi import HTTPException, Request, status

from lms.core.config import SETTINGS
from lms.core.metrics import RATE_LIMIT_HITS
from lms.db.redis import redis_pool
from lms.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RateLimitResult,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

rate_limiter: RateLimiter
if redis_pool is not None:
    rate_limiter = RedisRateLimiter(redis_pool)
else:
    rate_limiter = InMemoryRateLimiter()


def require_rate_limit(scope: str, config: RateLimitConfig):
    """Dependency factory: spend one token from the caller's `scope` bucket.

    Usage:
        @router.post("/login", dependencies=[Depends(
            require_rate_limit("login", LOGIN_LIMIT)
        )])
    """

    async def _check(request: Request) -> None:
        key = f"{scope}:{_build_key(request)}"
        result: RateLimitResult = await rate_limiter.check(key, config)

        request.state.rate_limit_headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
        }

        if not result.allowed:
            RATE_LIMIT_HITS.labels(
                key_type="user" if ":user:" in key else "ip"
            ).inc()
            logger.warning("Rate limit exceeded key=%s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={"message": "Too many requests, try again later"},
                headers={
                    "Retry-After": str(int(result.retry_after) + 1),
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check


def _build_key(request: Request) -> str:
    """Identity for bucketing only; the signature is not checked here.

    A forged cookie just gets its own bucket.  Authentication happens
    in require_user.
    """
    cookie = request.cookies.get(SETTINGS.session_cookie_name)
    if cookie:
        try:
            claims = pyjwt.decode(cookie, options={"verify_signature": False})
        except pyjwt.InvalidTokenError:
            claims = {}
        sub = claims.get("sub")
        if sub:
            return f"user:{sub}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
