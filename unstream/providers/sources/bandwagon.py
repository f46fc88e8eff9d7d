"""Bandwagon adapter: scrape the artist search page for ``/@handle`` links."""

from __future__ import annotations

from bs4 import BeautifulSoup

from unstream.models.entities import ResultEntity
from unstream.providers.sources.base import BaseSourceAdapter

_MAX_RESULTS = 10


def parse_artist_links(html: str) -> list[tuple[str, str]]:
    """(name, url) pairs for every ``bandwagon.fm/@...`` link with a ``.bold`` name."""
    soup = BeautifulSoup(html, "html.parser")
    found: list[tuple[str, str]] = []
    seen: set[str] = set()
    for link in soup.select('a[href*="bandwagon.fm/@"]'):
        href = link.get("href") or ""
        name_el = link.select_one(".bold")
        name = name_el.get_text(strip=True) if name_el else ""
        if not href or not name or len(name) >= 100 or href in seen:
            continue
        seen.add(href)
        found.append((name, href))
    return found


class BandwagonAdapter(BaseSourceAdapter):
    """Name-only adapter for bandwagon.fm (no release data)."""

    @property
    def source_id(self) -> str:
        return "bandwagon"

    async def _search(self, query: str) -> list[ResultEntity]:
        page = await self._fetch(self._registry.search_url(self.source_id, query))
        if page is None:
            return []
        matched = [(name, url) for name, url in parse_artist_links(page) if self._matches(query, name)]
        return [self._entity(name=name, url=url) for name, url in matched[:_MAX_RESULTS]]
