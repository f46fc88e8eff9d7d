"""Process-local TTL cache for platform directories and shared feeds."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from cachetools import TTLCache

from unstream.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory cache backed by ``cachetools.TTLCache``.

    A burst of sub-queries usually asks every feed adapter for the same
    directory at once; :meth:`get_or_load` holds a per-key lock so only
    the first of them goes to the network.

    Parameters
    ----------
    max_size:
        Number of directories/feeds kept before the oldest is evicted.
    ttl:
        Seconds a directory or feed stays fresh.
    """

    def __init__(self, max_size: int = 64, ttl: int = 600) -> None:
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)
        self._locks: dict[str, asyncio.Lock] = {}

    async def get(self, key: str) -> Any | None:
        value = self._cache.get(key)
        logger.debug("cache_hit" if value is not None else "cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any) -> None:
        self._cache[key] = value
        logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        value = self._cache.get(key)
        if value is not None:
            return value
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            value = self._cache.get(key)
            if value is not None:
                logger.debug("cache_filled_while_waiting", key=key)
                return value
            value = await loader()
            if value:
                self._cache[key] = value
                logger.debug("cache_loaded", key=key)
        return value
