"""Shared behaviour for feed-based adapters.

Feed adapters derive a syndication feed URL from an artist's base URL,
read every ``<item>`` through the release extractor and keep the newest
dated one.  Feeds shared by many artists (Mirlo publishes one global
feed) can be cached so a burst of searches reads them once.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx

from unstream.config.settings import Settings
from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.interfaces.cache_provider import ICacheProvider
from unstream.models.entities import LatestRelease
from unstream.providers.sources.base import BaseSourceAdapter
from unstream.services.release_extractor import FeedItem, extract_feed_items, pick_latest


def feed_url_for(base_url: str) -> str:
    """Faircamp-style feed location: ``<site>/feed.rss``."""
    return f"{base_url.rstrip('/')}/feed.rss"


class FeedSourceAdapter(BaseSourceAdapter):
    """Base for adapters whose release data comes from RSS feeds."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings | None = None,
        registry: SourceRegistry = SOURCE_REGISTRY,
        cache: ICacheProvider | None = None,
        name_threshold: float = 0.85,
    ) -> None:
        super().__init__(http_client, settings, registry, name_threshold)
        self._cache = cache

    async def _feed_items(self, feed_url: str, cached: bool = False) -> list[FeedItem]:
        if cached and self._cache is not None:
            return await self._cache.get_or_load(f"feed:{feed_url}", lambda: self._read_feed(feed_url))
        return await self._read_feed(feed_url)

    async def _read_feed(self, feed_url: str) -> list[FeedItem]:
        body = await self._fetch(feed_url, timeout=self._settings.feed_timeout)
        if body is None:
            return []
        return extract_feed_items(body, source=self.source_id)

    async def _latest_from_feed(
        self,
        feed_url: str,
        belongs: Callable[[FeedItem], bool] | None = None,
        cached: bool = False,
    ) -> LatestRelease | None:
        items = await self._feed_items(feed_url, cached=cached)
        if belongs is not None:
            items = [item for item in items if belongs(item)]
        return pick_latest(item.to_release() for item in items)
