"""Rate limiting infrastructure for public endpoints.

Supports both Redis-based (distributed) and in-memory (single instance) rate limiting.
Uses a sliding window log: excess requests are rejected, never queued.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from lookbook.infrastructure.redis import redis_client
from lookbook.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""

    requests: int  # Number of requests allowed
    window_seconds: int  # Time window in seconds
    key_prefix: str = "ratelimit"  # Redis key prefix


RATE_LIMITS = {
    # Analytics ingestion - batched by the client buffer, limit per source IP
    "analytics_track": RateLimitConfig(
        requests=settings.track_rate_limit_requests,
        window_seconds=settings.track_rate_limit_window_seconds,
        key_prefix="rl:track",
    ),
    # Admin login - stricter to prevent brute force
    "auth": RateLimitConfig(requests=10, window_seconds=60, key_prefix="rl:auth"),
    "default": RateLimitConfig(requests=100, window_seconds=60, key_prefix="rl:api"),
}


class InMemoryRateLimiter:
    """In-memory rate limiter for development/single instance deployments."""

    def __init__(self, sweep_interval_seconds: float = 60.0) -> None:
        # Structure: {key: [timestamp, ...]}
        self._windows: dict[str, list[float]] = {}
        # Structure: {key: time after which the key holds no live requests}
        self._expires: dict[str, float] = {}
        self._lock = asyncio.Lock()
        self._sweep_interval = sweep_interval_seconds
        self._last_sweep = time.time()

    def _sweep(self, now: float) -> None:
        """Drop keys whose requests have all left their window."""
        expired = [key for key, expires_at in self._expires.items() if expires_at <= now]
        for key in expired:
            self._windows.pop(key, None)
            self._expires.pop(key, None)
        self._last_sweep = now

    async def is_rate_limited(
        self,
        key: str,
        config: RateLimitConfig,
    ) -> tuple[bool, int, int]:
        """Check if request should be rate limited.

        Args:
            key: Unique identifier (client IP)
            config: Rate limit configuration

        Returns:
            Tuple of (is_limited, remaining_requests, reset_time_seconds)
        """
        async with self._lock:
            now = time.time()
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            window_start = now - config.window_seconds
            full_key = f"{config.key_prefix}:{key}"

            timestamps = [ts for ts in self._windows.get(full_key, []) if ts > window_start]
            total_requests = len(timestamps)

            if total_requests >= config.requests:
                self._windows[full_key] = timestamps
                reset_seconds = int(min(timestamps) + config.window_seconds - now)
                return True, 0, max(1, reset_seconds)

            timestamps.append(now)
            self._windows[full_key] = timestamps
            self._expires[full_key] = now + config.window_seconds
            remaining = config.requests - total_requests - 1
            return False, remaining, config.window_seconds

    @property
    def tracked_keys(self) -> int:
        """Number of client keys currently held in memory."""
        return len(self._windows)

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._windows.clear()
        self._expires.clear()


class RedisRateLimiter:
    """Redis-based rate limiter for distributed deployments."""

    async def is_rate_limited(
        self,
        key: str,
        config: RateLimitConfig,
    ) -> tuple[bool, int, int]:
        """Check if request should be rate limited using Redis sorted sets.

        Args:
            key: Unique identifier (client IP)
            config: Rate limit configuration

        Returns:
            Tuple of (is_limited, remaining_requests, reset_time_seconds)
        """
        full_key = f"{config.key_prefix}:{key}"
        now = time.time()
        window_start = now - config.window_seconds

        client = redis_client.client
        if client is None:
            return False, config.requests, config.window_seconds

        try:
            pipe = client.pipeline()
            pipe.zremrangebyscore(full_key, 0, window_start)
            pipe.zcard(full_key)
            pipe.zadd(full_key, {str(now): now})
            pipe.expire(full_key, config.window_seconds + 1)
            results = await pipe.execute()

            current_count = results[1]

            if current_count >= config.requests:
                # Rejected requests do not consume quota
                await client.zrem(full_key, str(now))
                oldest = await client.zrange(full_key, 0, 0, withscores=True)
                if oldest:
                    reset_seconds = int(oldest[0][1] + config.window_seconds - now)
                else:
                    reset_seconds = config.window_seconds
                return True, 0, max(1, reset_seconds)

            remaining = config.requests - current_count - 1
            return False, remaining, config.window_seconds

        except Exception as e:
            logger.warning(f"Redis rate limit check failed: {e}")
            # Fail open - allow request if Redis fails
            return False, config.requests, config.window_seconds


# Global rate limiter instances
in_memory_limiter = InMemoryRateLimiter()
_redis_limiter = RedisRateLimiter()


async def check_rate_limit(
    key: str,
    config: RateLimitConfig,
) -> tuple[bool, int, int]:
    """Check rate limit using appropriate backend.

    Returns:
        Tuple of (is_limited, remaining_requests, reset_time_seconds)
    """
    if redis_client.available:
        return await _redis_limiter.is_rate_limited(key, config)
    return await in_memory_limiter.is_rate_limited(key, config)


def get_client_ip(request: Request) -> str:
    """Extract the server-observed client IP.

    X-Forwarded-For and X-Real-IP are client-controlled unless a proxy we run
    rewrites them, so they are read only when trust_proxy_headers is enabled.
    Even then only the entry written by the outermost trusted proxy is used;
    anything to its left was supplied by the client.

    Args:
        request: FastAPI request

    Returns:
        Client IP address
    """
    peer = request.client.host if request.client else "unknown"
    if not settings.trust_proxy_headers:
        return peer

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        entries = [entry.strip() for entry in forwarded_for.split(",") if entry.strip()]
        hops = max(settings.trusted_proxy_hops, 1)
        # A shorter chain did not pass through all of our proxies
        return entries[-hops] if len(entries) >= hops else peer

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return peer


def rate_limit(config_name: str = "default"):
    """FastAPI dependency limiting requests per client IP.

    Args:
        config_name: Name of rate limit config from RATE_LIMITS

    Usage:
        @router.post("/track")
        async def track(
            request: Request,
            _: None = Depends(rate_limit("analytics_track")),
        ):
            ...
    """
    config = RATE_LIMITS.get(config_name, RATE_LIMITS["default"])

    async def rate_limit_dependency(request: Request) -> None:
        key = get_client_ip(request)

        is_limited, remaining, reset_seconds = await check_rate_limit(key, config)

        request.state.rate_limit_remaining = remaining
        request.state.rate_limit_reset = reset_seconds

        if is_limited:
            logger.warning(
                f"Rate limit exceeded for {key} on {request.url.path} "
                f"(limit: {config.requests}/{config.window_seconds}s)"
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
                headers={
                    "Retry-After": str(reset_seconds),
                    "X-RateLimit-Limit": str(config.requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(int(time.time()) + reset_seconds),
                },
            )

    return rate_limit_dependency
