"""Bandcamp adapter: search-page scraping plus per-artist release lookup.

No API key exists, so the public search page is parsed with BeautifulSoup.
For the best-matching artists the adapter then opens ``<artist>/music``,
follows at most five album/track links and keeps the newest dated one as
the artist's LatestRelease.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

from unstream.models.entities import EntityType, LatestRelease, ResultEntity
from unstream.providers.sources.base import BaseSourceAdapter

_MAX_SEARCH_RESULTS = 10


@dataclass(frozen=True)
class BandcampSearchHit:
    """One row of the Bandcamp search results page."""

    name: str
    url: str
    type: EntityType
    artist: str | None = None
    image_url: str | None = None

    @property
    def match_name(self) -> str:
        """Name compared with the query: albums and tracks match on their artist."""
        if self.type is EntityType.ARTIST:
            return self.name
        return self.artist or self.name


def parse_search_results(html: str, limit: int = _MAX_SEARCH_RESULTS) -> list[BandcampSearchHit]:
    """Parse ``.searchresult`` rows into hits, skipping rows without a name or link."""
    soup = BeautifulSoup(html, "html.parser")
    hits: list[BandcampSearchHit] = []
    seen_urls: set[str] = set()

    for item in soup.select(".searchresult"):
        heading = item.select_one(".heading a")
        if heading is None:
            continue
        name = heading.get_text(strip=True)
        url = (heading.get("href") or "").split("?")[0].rstrip("/")
        if not name or not url or url in seen_urls:
            continue
        seen_urls.add(url)

        item_type = item.select_one(".itemtype")
        type_text = item_type.get_text(strip=True).lower() if item_type else "artist"
        if type_text == "album":
            entity_type = EntityType.ALBUM
        elif type_text == "track":
            entity_type = EntityType.TRACK
        else:
            entity_type = EntityType.ARTIST

        artist: str | None = None
        subhead = item.select_one(".subhead")
        if subhead is not None:
            by_match = re.search(r"\bby\s+(.+)$", subhead.get_text(" ", strip=True))
            if by_match:
                artist = by_match.group(1).strip()

        img = item.select_one(".art img")
        image_url = img.get("src") if img is not None else None

        hits.append(
            BandcampSearchHit(
                name=name,
                url=url,
                type=entity_type,
                artist=artist if entity_type is not EntityType.ARTIST else None,
                image_url=image_url or None,
            )
        )
        if len(hits) >= limit:
            break
    return hits


def artist_root(url: str) -> str:
    """``https://x.bandcamp.com/album/y`` -> ``https://x.bandcamp.com``."""
    return re.sub(r"/(?:music|album|track)(?:/.*)?$", "", url.split("?")[0]).rstrip("/")


class BandcampAdapter(BaseSourceAdapter):
    """Artist-page scraping adapter for bandcamp.com."""

    @property
    def source_id(self) -> str:
        return "bandcamp"

    async def _search(self, query: str) -> list[ResultEntity]:
        search_url = self._registry.search_url(self.source_id, query)
        page = await self._fetch(search_url)
        if page is None:
            return []

        hits = [hit for hit in parse_search_results(page) if self._matches(query, hit.match_name)]
        artist_hits = [hit for hit in hits if hit.type is EntityType.ARTIST]
        lookups = artist_hits[: self._settings.max_release_lookups]
        releases = await asyncio.gather(*(self.latest_release(hit.url) for hit in lookups))
        release_by_url = {hit.url: release for hit, release in zip(lookups, releases)}

        return [
            self._entity(
                name=hit.name,
                url=hit.url,
                entity_type=hit.type,
                artist=hit.artist,
                image_url=hit.image_url,
                latest_release=release_by_url.get(hit.url),
            )
            for hit in hits
        ]

    async def latest_release(self, artist_url: str) -> LatestRelease | None:
        """Newest release listed on the artist's ``/music`` page."""
        return await self._latest_from_catalog(f"{artist_root(artist_url)}/music")
