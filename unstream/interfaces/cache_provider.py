"""Abstract base class for cache providers.

Adapters that depend on large, slowly-changing platform directories (the
Faircamp webring, the Jam.coop artist list, Mirlo's global release feed)
keep them behind this contract so every search does not refetch them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any


class ICacheProvider(ABC):
    """Contract for async key-value caches."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* for the provider's configured TTL."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; a no-op if absent."""

    @abstractmethod
    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for *key*, awaiting *loader* on a miss.

        Concurrent misses for the same key share a single *loader* call.
        Empty results (``None``, ``[]``, ``{}``) are returned but not
        stored, so a failed directory fetch is retried on the next search.
        """
