"""Unit tests for the unstream.cli.search command."""

from __future__ import annotations

import datetime
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from unstream.cli.search import _build_parser, _run, format_json_output, format_text_output, main
from unstream.models.entities import EntityType, MatchConfidence, SearchResponse
from unstream.utils.errors import InvalidQueryError
from tests.conftest import link, make_entity, make_release


def _response() -> SearchResponse:
    return SearchResponse(
        query="Kid Lightbulbs",
        results=[
            make_entity(
                "Kid Lightbulbs",
                link(
                    "bandcamp",
                    "https://kidlightbulbs.bandcamp.com",
                    make_release("Midnight EP", datetime.date(2025, 1, 10)),
                ),
                link("qobuz", "https://www.qobuz.com/us-en/interpreter/kid-lightbulbs/1"),
                confidence=MatchConfidence.VERIFIED,
            ),
            make_entity(
                "Midnight EP",
                link("bandcamp", "https://kidlightbulbs.bandcamp.com/album/midnight-ep"),
                artist="Kid Lightbulbs",
                entity_type=EntityType.ALBUM,
            ),
        ],
        has_pending_enrichment=True,
    )


class TestFormatting:
    def test_text_output(self) -> None:
        text = format_text_output(_response())
        assert 'Results for "Kid Lightbulbs":' in text
        assert "Kid Lightbulbs (artist) [verified]" in text
        assert "  - bandcamp: https://kidlightbulbs.bandcamp.com" in text
        assert "      latest: Midnight EP (2025-01-10)" in text
        assert "Midnight EP by Kid Lightbulbs (album)" in text
        assert text.endswith("--enrich for official and social links.")

    def test_text_output_empty(self) -> None:
        assert format_text_output(SearchResponse(query="Nobody")) == 'No results found for "Nobody".'

    def test_json_output(self) -> None:
        payload = json.loads(format_json_output(_response()))
        assert payload["query"] == "Kid Lightbulbs"
        assert payload["results"][0]["match_confidence"] == "verified"
        assert payload["results"][0]["platforms"][0]["latest_release"]["release_date"] == "2025-01-10"


class TestParser:
    def test_flags(self) -> None:
        args = _build_parser().parse_args(["Static Age", "--json", "--enrich", "-q"])
        assert args.query == "Static Age"
        assert args.json_output is True
        assert args.enrich is True
        assert args.quiet is True

    def test_query_required(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args([])


class TestRun:
    def _services(self, response=None, error: Exception | None = None) -> dict:
        orchestrator = MagicMock()
        orchestrator.search = AsyncMock(return_value=response, side_effect=error)
        enrichment = MagicMock()
        enrichment.lookup = AsyncMock(return_value="enrichment")
        enrichment.enrich = MagicMock(side_effect=lambda resp, _data: resp.model_copy(update={"has_pending_enrichment": False}))
        return {"orchestrator": orchestrator, "enrichment_service": enrichment}

    @pytest.mark.asyncio
    async def test_prints_results(self, capsys: pytest.CaptureFixture[str]) -> None:
        services = self._services(_response())
        with patch("unstream.main.build_services", return_value=services):
            code = await _run("Kid Lightbulbs", json_output=False, enrich=False)

        assert code == 0
        assert "Kid Lightbulbs (artist) [verified]" in capsys.readouterr().out
        services["enrichment_service"].lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enrich_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        services = self._services(_response())
        with patch("unstream.main.build_services", return_value=services):
            code = await _run("Kid Lightbulbs", json_output=True, enrich=True)

        assert code == 0
        services["enrichment_service"].lookup.assert_awaited_once_with("Kid Lightbulbs")
        assert json.loads(capsys.readouterr().out)["has_pending_enrichment"] is False

    @pytest.mark.asyncio
    async def test_invalid_query_exit_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        services = self._services(error=InvalidQueryError("Search query is empty"))
        with patch("unstream.main.build_services", return_value=services):
            code = await _run("  ", json_output=False, enrich=False)

        assert code == 2
        assert "Search query is empty" in capsys.readouterr().err

    def test_main_exits_with_run_status(self) -> None:
        with patch("unstream.cli.search._run", new=AsyncMock(return_value=0)) as run:
            with pytest.raises(SystemExit) as exc_info:
                main(["Static Age"])
        assert exc_info.value.code == 0
        run.assert_awaited_once_with("Static Age", False, False)
