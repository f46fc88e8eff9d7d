"""Unit tests for the component factories in unstream.main."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx

from unstream.config.settings import Settings
from unstream.pipeline import SearchOrchestrator
from unstream.providers.sources import BandcampAdapter, DirectLinkAdapter, MirloAdapter
from unstream.services.release_checker import ReleaseChecker


def _config(*enabled: str) -> dict:
    return {"sources": {"enabled": list(enabled)}, "search": {"name_match_threshold": 0.9}}


class TestBuildServices:
    def test_adapters_follow_enabled_order(self) -> None:
        from unstream.main import build_services

        services = build_services(
            Settings(), _config("mirlo", "ampwall", "bandcamp"), AsyncMock(spec=httpx.AsyncClient)
        )
        adapters = services["adapters"]
        assert [a.source_id for a in adapters] == ["mirlo", "ampwall", "bandcamp"]
        assert isinstance(adapters[0], MirloAdapter)
        assert isinstance(adapters[1], DirectLinkAdapter)
        assert isinstance(adapters[2], BandcampAdapter)

    def test_services_present(self) -> None:
        from unstream.main import build_services

        services = build_services(Settings(), _config("bandcamp"), AsyncMock(spec=httpx.AsyncClient))
        assert isinstance(services["orchestrator"], SearchOrchestrator)
        assert isinstance(services["release_checker"], ReleaseChecker)
        assert services["search_service"].adapters == services["adapters"]

    def test_registry_only_sources_are_skipped(self) -> None:
        from unstream.main import build_services

        services = build_services(
            Settings(), _config("bandcamp", "discogs"), AsyncMock(spec=httpx.AsyncClient)
        )
        assert [a.source_id for a in services["adapters"]] == ["bandcamp"]
