"""Unit tests for the recent-release checker."""

from __future__ import annotations

import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from unstream.providers.sources import BandcampAdapter, FaircampAdapter, MirloAdapter, QobuzAdapter
from unstream.services.release_checker import ReleaseChecker, is_recent, qobuz_artist_name
from unstream.utils.errors import InvalidURLError
from tests.conftest import make_release

D = datetime.date
TODAY = D(2025, 1, 12)

URLS = {
    "bandcamp": "https://kidlightbulbs.bandcamp.com",
    "faircamp": "https://kid.example",
    "mirlo": "https://mirlo.space/kidlightbulbs",
    "qobuz": "https://www.qobuz.com/us-en/interpreter/kid-lightbulbs/123",
}


def _adapter(spec: type, result=None, error: Exception | None = None) -> MagicMock:
    adapter = MagicMock(spec=spec)
    adapter.latest_release = AsyncMock(return_value=result, side_effect=error)
    return adapter


def _checker(bandcamp=None, faircamp=None, mirlo=None, qobuz=None) -> ReleaseChecker:
    return ReleaseChecker(
        bandcamp=bandcamp or _adapter(BandcampAdapter),
        faircamp=faircamp or _adapter(FaircampAdapter),
        mirlo=mirlo or _adapter(MirloAdapter),
        qobuz=qobuz or _adapter(QobuzAdapter),
        today=lambda: TODAY,
    )


class TestHelpers:
    def test_qobuz_artist_name(self) -> None:
        assert qobuz_artist_name(URLS["qobuz"]) == "Kid Lightbulbs"
        assert qobuz_artist_name("https://www.qobuz.com/us-en/album/x/1") is None
        disambiguated = "https://www.qobuz.com/us-en/interpreter/kid-lightbulbs-2/999"
        assert qobuz_artist_name(disambiguated) == "Kid Lightbulbs"

    @pytest.mark.parametrize(
        "released, expected",
        [(TODAY, True), (D(2025, 1, 4), True), (D(2025, 1, 3), False), (D(2025, 1, 13), False)],
    )
    def test_is_recent(self, released: datetime.date, expected: bool) -> None:
        assert is_recent(released, TODAY, 8) is expected


class TestReleaseChecker:
    @pytest.mark.asyncio
    async def test_priority_order_wins_over_recency(self) -> None:
        checker = _checker(
            bandcamp=_adapter(BandcampAdapter, make_release("Newest", D(2025, 1, 11))),
            mirlo=_adapter(MirloAdapter, make_release("Midnight EP", D(2025, 1, 10))),
        )
        found = await checker.check(URLS)
        assert found.platform == "mirlo"
        assert found.title == "Midnight EP"
        assert found.release_date == D(2025, 1, 10)

    @pytest.mark.asyncio
    async def test_stale_releases_ignored(self) -> None:
        checker = _checker(
            mirlo=_adapter(MirloAdapter, make_release("Old", D(2024, 6, 1))),
            qobuz=_adapter(QobuzAdapter, make_release("Fresh", D(2025, 1, 12))),
        )
        found = await checker.check(URLS)
        assert found.platform == "qobuz"

    @pytest.mark.asyncio
    async def test_qobuz_looked_up_by_slug_name(self) -> None:
        qobuz = _adapter(QobuzAdapter, make_release("Fresh", D(2025, 1, 12)))
        await _checker(qobuz=qobuz).check({"qobuz": URLS["qobuz"]})
        qobuz.latest_release.assert_awaited_once_with("Kid Lightbulbs")

    @pytest.mark.asyncio
    async def test_qobuz_disambiguator_dropped_from_lookup_name(self) -> None:
        qobuz = _adapter(QobuzAdapter, make_release("Fresh", D(2025, 1, 12)))
        url = "https://www.qobuz.com/us-en/interpreter/kid-lightbulbs-2/999"
        found = await _checker(qobuz=qobuz).check({"qobuz": url})
        assert found.platform == "qobuz"
        qobuz.latest_release.assert_awaited_once_with("Kid Lightbulbs")

    @pytest.mark.asyncio
    async def test_qobuz_falls_back_to_full_slug_name(self) -> None:
        qobuz = _adapter(QobuzAdapter)
        qobuz.latest_release.side_effect = [None, make_release("Fresh", D(2025, 1, 12))]
        url = "https://www.qobuz.com/us-en/interpreter/blink-182/42"
        found = await _checker(qobuz=qobuz).check({"qobuz": url})
        assert found is not None
        assert [c.args for c in qobuz.latest_release.await_args_list] == [("Blink",), ("Blink 182",)]

    @pytest.mark.asyncio
    async def test_failed_lookup_is_isolated(self) -> None:
        checker = _checker(
            mirlo=_adapter(MirloAdapter, error=RuntimeError("feed down")),
            faircamp=_adapter(FaircampAdapter, make_release("Site Single", D(2025, 1, 9))),
        )
        found = await checker.check(URLS)
        assert found.platform == "faircamp"

    @pytest.mark.asyncio
    async def test_only_supplied_platforms_queried(self) -> None:
        bandcamp = _adapter(BandcampAdapter, make_release("Fresh", D(2025, 1, 12)))
        mirlo = _adapter(MirloAdapter)
        await _checker(bandcamp=bandcamp, mirlo=mirlo).check(
            {"bandcamp": URLS["bandcamp"], "mirlo": None, "myspace": "https://myspace.com/kid"}
        )
        bandcamp.latest_release.assert_awaited_once_with(URLS["bandcamp"])
        mirlo.latest_release.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nothing_recent(self) -> None:
        assert await _checker().check(URLS) is None
        assert await _checker().check({}) is None

    @pytest.mark.asyncio
    async def test_invalid_url_raises(self) -> None:
        with pytest.raises(InvalidURLError):
            await _checker().check({"bandcamp": "kidlightbulbs.bandcamp.com"})
