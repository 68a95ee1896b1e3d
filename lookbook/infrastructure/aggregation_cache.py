"""Short-TTL read-through cache for dashboard aggregates.

Entries are keyed by (query name, time range). There is no invalidation on
ingestion: new events show up once the cached entry expires.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

from lookbook.infrastructure.redis import redis_client
from lookbook.settings import settings

logger = logging.getLogger(__name__)


class AggregationCache:
    """Read-through cache backed by Redis when available, else process memory."""

    def __init__(self, ttl_seconds: int, key_prefix: str = "analytics") -> None:
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        # Structure: {key: (expires_at, value)}
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    def _key(self, query_name: str, time_range: str) -> str:
        return f"{self.key_prefix}:{query_name}:{time_range}"

    async def get(self, query_name: str, time_range: str) -> Any | None:
        """Return a cached value, or None when missing or expired."""
        key = self._key(query_name, time_range)
        if redis_client.available:
            try:
                return await redis_client.get_json(key)
            except Exception as e:
                logger.warning(f"Analytics cache read failed for {key}: {e}")
                return None

        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    async def set(self, query_name: str, time_range: str, value: Any) -> None:
        """Store a value for the configured TTL."""
        key = self._key(query_name, time_range)
        if redis_client.available:
            try:
                await redis_client.set_json(key, value, ttl=self.ttl_seconds)
            except Exception as e:
                logger.warning(f"Analytics cache write failed for {key}: {e}")
            return

        async with self._lock:
            self._entries[key] = (time.monotonic() + self.ttl_seconds, value)

    async def get_or_compute(
        self,
        query_name: str,
        time_range: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Return the cached value or compute, store and return it."""
        cached = await self.get(query_name, time_range)
        if cached is not None:
            return cached
        value = await compute()
        await self.set(query_name, time_range, value)
        return value

    def clear(self) -> None:
        """Drop all in-process entries."""
        self._entries.clear()


# Global cache instance shared by the analytics routes
aggregation_cache = AggregationCache(ttl_seconds=settings.analytics_cache_ttl_seconds)
