"""Jam.coop adapter: match against the (cached) public artist directory.

Jam.coop has no search endpoint; its ``/artists`` page lists every artist
as an ``/artists/<slug>`` link, so the whole list is fetched once per
cache TTL and matched locally.
"""

from __future__ import annotations

import httpx
from bs4 import BeautifulSoup

from unstream.config.settings import Settings
from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.interfaces.cache_provider import ICacheProvider
from unstream.models.entities import ResultEntity
from unstream.providers.sources.base import BaseSourceAdapter
from unstream.utils.text_normalizer import normalize_for_comparison

DIRECTORY_URL = "https://jam.coop/artists"
_BASE_URL = "https://jam.coop"
_MAX_RESULTS = 10


def parse_directory(html: str) -> dict[str, tuple[str, str]]:
    """Comparison key -> (display name, artist URL); first listing of a name wins."""
    soup = BeautifulSoup(html, "html.parser")
    directory: dict[str, tuple[str, str]] = {}
    for link in soup.select('a[href^="/artists/"]'):
        href = (link.get("href") or "").rstrip("/")
        name = link.get_text(" ", strip=True)
        if not name or href == "/artists":
            continue
        key = normalize_for_comparison(name)
        if key and key not in directory:
            directory[key] = (name, f"{_BASE_URL}{href}")
    return directory


class JamcoopAdapter(BaseSourceAdapter):
    """Directory-matching adapter for jam.coop."""

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

    @property
    def source_id(self) -> str:
        return "jamcoop"

    async def _directory(self) -> dict[str, tuple[str, str]]:
        if self._cache is not None:
            return await self._cache.get_or_load(DIRECTORY_URL, self._read_directory)
        return await self._read_directory()

    async def _read_directory(self) -> dict[str, tuple[str, str]]:
        page = await self._fetch(DIRECTORY_URL)
        return parse_directory(page) if page is not None else {}

    async def _search(self, query: str) -> list[ResultEntity]:
        entities: list[ResultEntity] = []
        for name, url in (await self._directory()).values():
            if self._matches(query, name):
                entities.append(self._entity(name=name, url=url))
            if len(entities) >= _MAX_RESULTS:
                break
        return entities
