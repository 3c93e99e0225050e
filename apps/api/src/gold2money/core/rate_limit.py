"""
Rate Limiting Module

Provides rate limiting for API endpoints using Redis as the backend.
Falls back to in-memory storage if Redis is unavailable.

Applied to:
- Admin login (prevents brute force against the shared password)
- Loan application submission (prevents email spam)
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger
from fastapi import Request
from redis.asyncio import Redis

from gold2money.core.errors import RateLimitExceeded
from gold2money.core.scheduler import register_job

logger = logging.getLogger(__name__)

PURGE_RATE_LIMITS_JOB_ID = "rate_limits_purge_expired"


class RateLimiter:
    """Sliding-window request counter keyed by client and endpoint."""

    def __init__(self, redis: Redis | None = None):
        self.redis = redis
        # In-memory fallback. Format: {key: [timestamp, ...]}
        self._memory_store: dict[str, list[float]] = {}
        # Window each in-memory key was last checked with
        self._memory_windows: dict[str, int] = {}

    async def _check_redis(self, key: str, limit: int, window_seconds: int) -> bool:
        """
        Check rate limit using Redis sorted sets.

        Returns:
            True if request is allowed, False if rate limit exceeded
        """
        now = time.time()
        window_start = now - window_seconds

        pipe = self.redis.pipeline()
        # Remove old entries outside the window
        pipe.zremrangebyscore(key, 0, window_start)
        pipe.zcard(key)
        pipe.zadd(key, {str(now): now})
        pipe.expire(key, window_seconds)

        results = await pipe.execute()
        current_count = results[1]

        return current_count < limit

    def _check_memory(self, key: str, limit: int, window_seconds: int) -> bool:
        """
        Check rate limit using in-memory storage.

        Note: This doesn't work across multiple server instances.
        """
        now = time.time()
        window_start = now - window_seconds

        entries = [ts for ts in self._memory_store.get(key, []) if ts > window_start]
        self._memory_windows[key] = window_seconds

        if len(entries) >= limit:
            self._memory_store[key] = entries
            return False

        entries.append(now)
        self._memory_store[key] = entries
        return True

    async def check(self, key: str, limit: int, window_seconds: int) -> bool:
        """
        Check if a request is within rate limits.

        Tries Redis first, falls back to in-memory storage.

        Args:
            key: Unique key for this rate limit (e.g., "rate_limit:1.2.3.4:/api/login")
            limit: Maximum requests allowed in the window
            window_seconds: Time window in seconds

        Returns:
            True if request is allowed, False if rate limit exceeded
        """
        if self.redis is not None:
            try:
                return await self._check_redis(key, limit, window_seconds)
            except Exception as e:
                logger.warning(f"Redis rate limit check failed: {e}")

        return self._check_memory(key, limit, window_seconds)

    def purge_expired(self) -> int:
        """
        Drop in-memory keys with no requests left inside their window.

        Returns:
            Number of keys removed
        """
        now = time.time()
        removed = 0
        for key in list(self._memory_store):
            window_start = now - self._memory_windows[key]
            entries = [ts for ts in self._memory_store[key] if ts > window_start]
            if entries:
                self._memory_store[key] = entries
            else:
                del self._memory_store[key]
                del self._memory_windows[key]
                removed += 1
        return removed


def register_rate_limit_jobs(limiter: RateLimiter) -> None:
    """Register an hourly sweep of idle in-memory rate limit keys."""

    async def purge_expired_rate_limits() -> None:
        removed = limiter.purge_expired()
        logger.info(f"Purged {removed} idle rate limit keys")

    register_job(
        job_id=PURGE_RATE_LIMITS_JOB_ID,
        func=purge_expired_rate_limits,
        trigger=IntervalTrigger(hours=1),
    )


def client_key(request: Request) -> str:
    """Default key: client IP + endpoint path."""
    client_ip = request.client.host if request.client else "unknown"
    return f"rate_limit:{client_ip}:{request.url.path}"


def rate_limit(
    scope: str,
    key_func: Callable[[Request], str] = client_key,
):
    """
    Rate limiting decorator for FastAPI endpoints.

    Limits are read from settings as ``{scope}_rate_limit`` and
    ``{scope}_rate_window_seconds``.

    Usage:
        @router.post("/login")
        @rate_limit("login")
        async def login(request: Request, ...):
            ...

    Raises:
        RateLimitExceeded: When rate limit is exceeded (HTTP 429)
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request: Request | None = kwargs.get("request")
            if request is None:
                request = next((arg for arg in args if isinstance(arg, Request)), None)

            if request is None:
                logger.warning(
                    f"Rate limit decorator on {func.__name__} couldn't find Request object"
                )
                return await func(*args, **kwargs)

            settings = request.app.state.settings
            limit = getattr(settings, f"{scope}_rate_limit")
            window_seconds = getattr(settings, f"{scope}_rate_window_seconds")
            key = key_func(request)

            limiter: RateLimiter = request.app.state.rate_limiter
            if not await limiter.check(key, limit, window_seconds):
                logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
                raise RateLimitExceeded(limit, window_seconds)

            return await func(*args, **kwargs)

        return wrapper

    return decorator


__all__ = [
    "RateLimiter",
    "rate_limit",
    "client_key",
    "register_rate_limit_jobs",
]
