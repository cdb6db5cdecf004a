"""Token-bucket rate limiting for the unauthenticated auth endpoints.

A bucket holds up to `capacity` tokens and refills at `refill_rate`
tokens per second; each request spends one.  Bursts up to capacity are
allowed and the long-run rate is the refill rate.  Only two numbers are
stored per key.

InMemoryRateLimiter is per-process (dev/test).  RedisRateLimiter keeps
the buckets in Redis so every API instance shares them.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of one check.

    retry_after is the number of seconds until the next token (0 when allowed).
    """

    allowed: bool
    remaining: int
    limit: int
    retry_after: float


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """capacity = burst size, refill_rate = tokens per second."""

    capacity: int = 60
    refill_rate: float = 1.0


# Password guessing: 10 attempts, then one every ~6 s.
LOGIN_LIMIT = RateLimitConfig(capacity=10, refill_rate=0.17)
# Account creation: 5 per client, then one a minute.
SIGNUP_LIMIT = RateLimitConfig(capacity=5, refill_rate=1 / 60)


@runtime_checkable
class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...
    async def reset(self, key: str) -> None: ...


class InMemoryRateLimiter:
    def __init__(self) -> None:
        # key -> (tokens_remaining, last_refill_timestamp)
        self._buckets: dict[str, tuple[float, float]] = {}

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()

        if key not in self._buckets:
            self._buckets[key] = (config.capacity - 1, now)
            return RateLimitResult(
                allowed=True,
                remaining=config.capacity - 1,
                limit=config.capacity,
                retry_after=0,
            )

        tokens, last_refill = self._buckets[key]
        tokens = min(config.capacity, tokens + (now - last_refill) * config.refill_rate)

        if tokens >= 1:
            tokens -= 1
            self._buckets[key] = (tokens, now)
            return RateLimitResult(
                allowed=True,
                remaining=int(tokens),
                limit=config.capacity,
                retry_after=0,
            )

        self._buckets[key] = (tokens, now)
        return RateLimitResult(
            allowed=False,
            remaining=0,
            limit=config.capacity,
            retry_after=(1 - tokens) / config.refill_rate,
        )

    async def reset(self, key: str) -> None:
        self._buckets.pop(key, None)

    def clear(self) -> None:
        """Drop every bucket (test isolation)."""
        self._buckets.clear()


class RedisRateLimiter:
    """Token bucket stored in a Redis hash.

    The refill-and-spend step is a read-modify-write, so it runs as one
    Lua script; Redis executes scripts atomically.
    """

    # KEYS[1] = bucket key
    # ARGV = capacity, refill_rate, now (seconds)
    # Returns {allowed (0/1), remaining, retry_after_ms}
    _LUA_SCRIPT = """
    local key = KEYS[1]
    local capacity = tonumber(ARGV[1])
    local refill_rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local ttl = math.ceil(capacity / refill_rate) + 60

    local bucket = redis.call('HMGET', key, 'tokens', 'last_refill')
    local tokens = tonumber(bucket[1])
    local last_refill = tonumber(bucket[2])

    if tokens == nil then
        tokens = capacity - 1
        redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
        redis.call('EXPIRE', key, ttl)
        return {1, tokens, 0}
    end

    tokens = math.min(capacity, tokens + (now - last_refill) * refill_rate)

    if tokens >= 1 then
        tokens = tokens - 1
        redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
        redis.call('EXPIRE', key, ttl)
        return {1, math.floor(tokens), 0}
    end

    redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
    return {0, 0, math.ceil((1 - tokens) / refill_rate * 1000)}
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = redis_client.register_script(self._LUA_SCRIPT)

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        allowed, remaining, retry_after_ms = await self._script(
            keys=[f"lms:ratelimit:{key}"],
            args=[config.capacity, config.refill_rate, time.time()],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=int(remaining),
            limit=config.capacity,
            retry_after=retry_after_ms / 1000,
        )

    async def reset(self, key: str) -> None:
        await self._redis.delete(f"lms:ratelimit:{key}")
