"""Per-client request throttling.

Redis sorted sets give a sliding window shared by all workers. When Redis is
not connected each worker keeps its own token buckets instead.
"""

import logging
import threading
import time
from dataclasses import dataclass, field

from fastapi import HTTPException, Request, status

from bayplanner.core.redis import get_redis

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 120
DEFAULT_WINDOW_SECONDS = 60

# Placement writes take a row lock on the bay; keep them tighter
WRITE_RATE_LIMIT = 30
WRITE_WINDOW_SECONDS = 60


@dataclass
class _Bucket:
    tokens: float
    updated: float


@dataclass
class LocalLimiter:
    """Thread-safe token buckets keyed by client."""

    limit: int
    window: int
    _buckets: dict[str, _Bucket] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def acquire(self, key: str, now: float | None = None) -> int:
        """Take one token for ``key``. Returns 0 if allowed, else seconds to wait."""
        now = time.monotonic() if now is None else now
        rate = self.limit / self.window
        with self._lock:
            bucket = self._buckets.setdefault(key, _Bucket(tokens=float(self.limit), updated=now))
            bucket.tokens = min(float(self.limit), bucket.tokens + (now - bucket.updated) * rate)
            bucket.updated = now
            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return 0
            return max(1, int((1.0 - bucket.tokens) / rate))


def client_key(request: Request) -> str:
    """Identify the caller, honouring X-Forwarded-For behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _too_many(retry_after: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Rate limit exceeded. Try again in {retry_after}s.",
        headers={"Retry-After": str(retry_after)},
    )


class RateLimit:
    """FastAPI dependency enforcing ``limit`` requests per ``window`` seconds."""

    def __init__(self, name: str, limit: int, window: int) -> None:
        self.name = name
        self.limit = limit
        self.window = window
        self.local = LocalLimiter(limit=limit, window=window)

    async def __call__(self, request: Request) -> None:
        key = f"ratelimit:{self.name}:{client_key(request)}"
        try:
            redis = get_redis()
        except RuntimeError:
            retry_after = self.local.acquire(key)
            if retry_after:
                raise _too_many(retry_after)
            return

        now = time.time()
        pipe = redis.pipeline()
        pipe.zremrangebyscore(key, 0, now - self.window)
        pipe.zadd(key, {str(now): now})
        pipe.zcard(key)
        pipe.zrange(key, 0, 0, withscores=True)
        pipe.expire(key, self.window)
        _, _, count, oldest, _ = await pipe.execute()

        if count > self.limit:
            retry_after = self.window
            if oldest:
                retry_after = max(1, int(oldest[0][1] + self.window - now))
            logger.info("Rate limit hit for %s", key)
            raise _too_many(retry_after)


rate_limit_default = RateLimit("default", DEFAULT_RATE_LIMIT, DEFAULT_WINDOW_SECONDS)
rate_limit_writes = RateLimit("writes", WRITE_RATE_LIMIT, WRITE_WINDOW_SECONDS)
