"""Shared plumbing for platform source adapters.

:class:`BaseSourceAdapter` owns the injected ``httpx.AsyncClient``, the
registry and the timeouts, and wraps each concrete adapter's ``_search``
so that nothing it raises ever reaches the fan-out.  It also provides the
catalog-page release lookup used by artist-page scraping adapters: fetch
a listing page, collect at most N release URLs, parse each page
concurrently, keep what parses and pick the newest.
"""

from __future__ import annotations

import asyncio
from abc import abstractmethod
from collections.abc import Callable

import httpx

from unstream.config.settings import Settings
from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.interfaces.source_adapter import ISourceAdapter
from unstream.models.entities import EntityType, LatestRelease, PlatformLink, ResultEntity
from unstream.services.release_extractor import (
    extract_release_links,
    parse_release_page,
    pick_latest,
)
from unstream.utils.errors import ExtractionError
from unstream.utils.http import fetch_text
from unstream.utils.logging import get_logger
from unstream.utils.text_normalizer import identity_key, names_match, similarity

LinkExtractor = Callable[[str, str, int], list[str]]
PageParser = Callable[[str, str, "str | None"], LatestRelease]


class BaseSourceAdapter(ISourceAdapter):
    """Common behaviour for every adapter that talks HTTP.

    Parameters
    ----------
    http_client:
        Shared async client; injected for testability.
    settings:
        Timeouts and lookup limits.
    registry:
        Platform catalog used for URL templates.
    name_threshold:
        Minimum rapidfuzz similarity (0.0-1.0) for a platform's own search
        hit to count as the queried artist when the comparison keys do not
        already match.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings | None = None,
        registry: SourceRegistry = SOURCE_REGISTRY,
        name_threshold: float = 0.85,
    ) -> None:
        self._http = http_client
        self._settings = settings or Settings()
        self._registry = registry
        self._name_threshold = name_threshold
        self._logger = get_logger(type(self).__module__)

    async def fetch_candidates(self, query: str) -> list[ResultEntity]:
        try:
            candidates = await self._search(query)
        except Exception as exc:  # noqa: BLE001 -- adapters never raise to the fan-out
            self._logger.warning(
                "adapter_failed",
                source=self.source_id,
                query=query,
                error=str(exc) or type(exc).__name__,
            )
            return []
        self._logger.info("adapter_complete", source=self.source_id, query=query, results=len(candidates))
        return candidates

    @abstractmethod
    async def _search(self, query: str) -> list[ResultEntity]:
        """Platform-specific lookup.  May raise; the caller contains it."""

    # -- Helpers for subclasses ------------------------------------------------

    def _matches(self, query: str, name: str) -> bool:
        if names_match(query, name):
            return True
        return similarity(query, name) >= self._name_threshold

    def _entity(
        self,
        name: str,
        url: str,
        entity_type: EntityType = EntityType.ARTIST,
        artist: str | None = None,
        image_url: str | None = None,
        latest_release: LatestRelease | None = None,
    ) -> ResultEntity:
        return ResultEntity(
            id=identity_key(name, artist) or url,
            name=name,
            artist=artist,
            type=entity_type,
            image_url=image_url,
            platforms=[
                PlatformLink(source_id=self.source_id, url=url, latest_release=latest_release)
            ],
        )

    async def _fetch(self, url: str, timeout: float | None = None) -> str | None:
        return await fetch_text(
            self._http,
            url,
            timeout=timeout or self._settings.search_timeout,
            source=self.source_id,
            user_agent=self._settings.http_user_agent,
        )

    async def _release_from_page(
        self, url: str, parser: PageParser = parse_release_page
    ) -> LatestRelease | None:
        page = await self._fetch(url, timeout=self._settings.page_timeout)
        if page is None:
            return None
        try:
            return parser(page, url, self.source_id)
        except ExtractionError as exc:
            self._logger.debug("release_page_skipped", source=self.source_id, url=url, error=str(exc))
            return None

    async def _latest_from_catalog(
        self,
        catalog_url: str,
        link_extractor: LinkExtractor = extract_release_links,
        parser: PageParser = parse_release_page,
    ) -> LatestRelease | None:
        """Newest release among the first few listed on *catalog_url*."""
        page = await self._fetch(catalog_url, timeout=self._settings.page_timeout)
        if page is None:
            return None

        links = link_extractor(page, catalog_url, self._settings.max_release_candidates)
        if not links:
            # Single-release artists: the catalog URL redirects to the release itself.
            try:
                return parser(page, catalog_url, self.source_id)
            except ExtractionError:
                return None

        outcomes = await asyncio.gather(
            *(self._release_from_page(link, parser) for link in links),
            return_exceptions=True,
        )
        releases: list[LatestRelease] = []
        for link, outcome in zip(links, outcomes):
            if isinstance(outcome, BaseException):
                self._logger.warning("release_page_failed", source=self.source_id, url=link, error=str(outcome))
            elif outcome is not None:
                releases.append(outcome)
        return pick_latest(releases)
