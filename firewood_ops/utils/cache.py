"""
In-process TTL cache for read-mostly reference lists (customer directory).

One instance is built by the app factory and kept on app.state; routes get
it through the get_reference_cache dependency.
"""
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from cachetools import TTLCache
from fastapi import Request

logger = logging.getLogger(__name__)


class ReferenceCache:
    """TTLCache wrapper with explicit invalidation"""

    def __init__(self, ttl_seconds: int = 300, maxsize: int = 128, timer: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._entries = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache (None when missing or expired)"""
        value = self._entries.get(key)
        if value is None:
            logger.debug("Cache MISS: %s", key)
            return None

        logger.debug("Cache HIT: %s", key)
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value
        logger.debug("Cache SET: %s (TTL: %ss)", key, self.ttl_seconds)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = await loader()
        self.set(key, value)
        return value

    def invalidate(self, key: str) -> bool:
        removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug("Cache DELETE: %s", key)
        return removed

    def invalidate_all(self) -> int:
        count = len(self)
        self._entries.clear()
        logger.debug("Cache CLEAR: %s keys", count)
        return count

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)


def get_reference_cache(request: Request) -> ReferenceCache:
    return request.app.state.reference_cache
