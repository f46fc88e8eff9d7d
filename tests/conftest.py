"""Shared pytest fixtures for the unstream test suite."""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from unstream.config.settings import Settings
from unstream.interfaces.source_adapter import ISourceAdapter
from unstream.models.entities import (
    EntityType,
    LatestRelease,
    MatchConfidence,
    PlatformLink,
    ResultEntity,
)
from unstream.utils.text_normalizer import identity_key

# ---------------------------------------------------------------------------
# HTTP mocks
# ---------------------------------------------------------------------------


def make_response(text: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.text = text
    response.status_code = status_code
    return response


def routed_client(routes: dict[str, Any]) -> AsyncMock:
    """AsyncMock ``httpx.AsyncClient`` answering ``get`` from *routes*.

    Values may be a body string (200), a ``(status, body)`` tuple or an
    exception instance to raise.  Unrouted URLs answer 404.
    """

    async def _get(url: str, **kwargs: Any) -> MagicMock:
        route = routes.get(url)
        if route is None:
            return make_response("", 404)
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, tuple):
            return make_response(route[1], route[0])
        return make_response(route)

    client = AsyncMock(spec=httpx.AsyncClient)
    client.get = AsyncMock(side_effect=_get)
    return client


@pytest.fixture
def client_factory() -> Callable[[dict[str, Any]], AsyncMock]:
    return routed_client


@pytest.fixture
def settings() -> Settings:
    return Settings(
        musicbrainz_app_name="unstream-test",
        musicbrainz_app_version="0.1.0",
        musicbrainz_contact="test@test.com",
        adapter_timeout=2.0,
        max_release_lookups=3,
    )


# ---------------------------------------------------------------------------
# Domain builders
# ---------------------------------------------------------------------------


def make_release(title: str, on: datetime.date | None = None, url: str | None = None) -> LatestRelease:
    return LatestRelease(
        title=title,
        url=url or f"https://example.com/album/{title.lower().replace(' ', '-')}",
        release_date=on,
    )


def make_entity(
    name: str,
    *links: PlatformLink,
    artist: str | None = None,
    entity_type: EntityType = EntityType.ARTIST,
    image_url: str | None = None,
    confidence: MatchConfidence | None = None,
) -> ResultEntity:
    return ResultEntity(
        id=identity_key(name, artist),
        name=name,
        artist=artist,
        type=entity_type,
        image_url=image_url,
        platforms=list(links),
        match_confidence=confidence,
    )


def link(source_id: str, url: str | None = None, release: LatestRelease | None = None) -> PlatformLink:
    return PlatformLink(
        source_id=source_id,
        url=url or f"https://{source_id}.example/artist",
        latest_release=release,
    )


class StubAdapter(ISourceAdapter):
    """In-memory adapter: canned candidates per query, optional delay or failure."""

    def __init__(
        self,
        source_id: str,
        results: dict[str, list[ResultEntity]] | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self._source_id = source_id
        self._results = results or {}
        self._delay = delay
        self._error = error
        self.queries: list[str] = []

    @property
    def source_id(self) -> str:
        return self._source_id

    async def fetch_candidates(self, query: str) -> list[ResultEntity]:
        self.queries.append(query)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return list(self._results.get(query, []))
