"""Faircamp adapter: webring directory lookup plus per-site RSS feed.

Faircamp sites are self-hosted static sites with no central search.  The
community webring publishes ``directory.json`` mapping each site's domain
to its title and artist names; matching sites are then read through their
``/feed.rss``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from unstream.models.entities import LatestRelease, ResultEntity
from unstream.providers.sources.feed import FeedSourceAdapter, feed_url_for
from unstream.utils.http import fetch_json

DIRECTORY_URL = "https://faircamp.webr.ing/directory.json"
_MAX_SITES = 10


def match_directory(
    directory: dict[str, Any], query: str, matches: Callable[[str, str], bool]
) -> list[tuple[str, str]]:
    """(artist name, site URL) pairs whose artist names match *query*."""
    found: list[tuple[str, str]] = []
    seen_sites: set[str] = set()
    for domain, info in directory.items():
        if not isinstance(info, dict):
            continue
        for artist in info.get("artists") or []:
            if not isinstance(artist, str) or not matches(query, artist):
                continue
            site = domain if domain.startswith("http") else f"https://{domain}"
            site = site.rstrip("/")
            if site not in seen_sites:
                seen_sites.add(site)
                found.append((artist, site))
            break
        if len(found) >= _MAX_SITES:
            break
    return found


class FaircampAdapter(FeedSourceAdapter):
    """Feed-based adapter for Faircamp sites."""

    @property
    def source_id(self) -> str:
        return "faircamp"

    async def _directory(self) -> dict[str, Any]:
        if self._cache is not None:
            return await self._cache.get_or_load(DIRECTORY_URL, self._read_directory)
        return await self._read_directory()

    async def _read_directory(self) -> dict[str, Any]:
        data = await fetch_json(
            self._http,
            DIRECTORY_URL,
            timeout=self._settings.search_timeout,
            source=self.source_id,
            user_agent=self._settings.http_user_agent,
        )
        return data if isinstance(data, dict) else {}

    async def _search(self, query: str) -> list[ResultEntity]:
        sites = match_directory(await self._directory(), query, self._matches)
        lookups = sites[: self._settings.max_release_lookups]
        releases = await asyncio.gather(*(self.latest_release(site) for _, site in lookups))
        release_by_site = {site: release for (_, site), release in zip(lookups, releases)}
        return [
            self._entity(name=artist, url=site, latest_release=release_by_site.get(site))
            for artist, site in sites
        ]

    async def latest_release(self, site_url: str) -> LatestRelease | None:
        """Newest item in the site's ``/feed.rss``."""
        return await self._latest_from_feed(feed_url_for(site_url))
