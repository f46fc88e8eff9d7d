"""New-release check for one artist across the platforms that date releases.

Given the artist's bandcamp, faircamp, mirlo and qobuz URLs (any subset),
each platform's latest release is looked up concurrently through the
matching adapter.  Releases older than ``recent_days`` (or dated in the
future) are discarded and the highest-priority platform's release wins:
mirlo, then faircamp, then bandcamp, then qobuz.
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Awaitable, Callable, Mapping

import structlog

from unstream.models.entities import LatestRelease, RecentRelease
from unstream.providers.sources.bandcamp import BandcampAdapter
from unstream.providers.sources.faircamp import FaircampAdapter
from unstream.providers.sources.mirlo import MirloAdapter
from unstream.providers.sources.qobuz import QobuzAdapter, artist_name_from_slug
from unstream.services.embed_resolver import validate_page_url
from unstream.utils.concurrency import settled_results
from unstream.utils.logging import get_logger
from unstream.utils.text_normalizer import slug_to_title

_logger: structlog.BoundLogger = get_logger(__name__)

RELEASE_PRIORITY: tuple[str, ...] = ("mirlo", "faircamp", "bandcamp", "qobuz")
DEFAULT_RECENT_DAYS = 8

_QOBUZ_SLUG = re.compile(r"/interpreter/([^/]+)/\d+")


def qobuz_artist_name(url: str) -> str | None:
    match = _QOBUZ_SLUG.search(url)
    return artist_name_from_slug(match.group(1)) if match else None


def is_recent(release_date: datetime.date, today: datetime.date, days: int = DEFAULT_RECENT_DAYS) -> bool:
    age = (today - release_date).days
    return 0 <= age <= days


class ReleaseChecker:
    """Finds a release from the last ``recent_days`` days, if any platform has one."""

    def __init__(
        self,
        bandcamp: BandcampAdapter,
        faircamp: FaircampAdapter,
        mirlo: MirloAdapter,
        qobuz: QobuzAdapter,
        recent_days: int = DEFAULT_RECENT_DAYS,
        today: Callable[[], datetime.date] = datetime.date.today,
        timeout: float | None = None,
    ) -> None:
        self._lookups: dict[str, Callable[[str], Awaitable[LatestRelease | None]]] = {
            "bandcamp": bandcamp.latest_release,
            "faircamp": faircamp.latest_release,
            "mirlo": mirlo.latest_release,
            "qobuz": self._qobuz_lookup(qobuz),
        }
        self._recent_days = recent_days
        self._today = today
        self._timeout = timeout

    @staticmethod
    def _qobuz_lookup(qobuz: QobuzAdapter) -> Callable[[str], Awaitable[LatestRelease | None]]:
        async def lookup(url: str) -> LatestRelease | None:
            match = _QOBUZ_SLUG.search(url)
            if match is None:
                return None
            # A trailing number is usually a disambiguator, but may be part of
            # the name ("blink-182"); try the full slug when the short one misses.
            names = [artist_name_from_slug(match.group(1))]
            if slug_to_title(match.group(1)) not in names:
                names.append(slug_to_title(match.group(1)))
            for name in names:
                release = await qobuz.latest_release(name)
                if release is not None:
                    return release
            return None

        return lookup

    async def check(self, platform_urls: Mapping[str, str | None]) -> RecentRelease | None:
        """Most relevant recent release among *platform_urls*.

        Raises:
            InvalidURLError: If a supplied URL is not an http(s) URL.
        """
        targets = {
            platform: validate_page_url(url)
            for platform, url in platform_urls.items()
            if url and platform in self._lookups
        }
        ignored = sorted(set(platform_urls) - set(self._lookups))
        if ignored:
            _logger.debug("release_check_platforms_ignored", platforms=ignored)
        if not targets:
            return None

        platforms = list(targets)
        outcomes = await settled_results(
            [self._tagged(platform, targets[platform]) for platform in platforms],
            labels=platforms,
            timeout=self._timeout,
            logger=_logger,
            event="release_check_failed",
        )

        today = self._today()
        recent: dict[str, LatestRelease] = {
            platform: release
            for platform, release in outcomes
            if release is not None
            and release.release_date is not None
            and is_recent(release.release_date, today, self._recent_days)
        }
        for platform in RELEASE_PRIORITY:
            release = recent.get(platform)
            if release is not None:
                _logger.info("recent_release_found", platform=platform, title=release.title)
                return RecentRelease(
                    platform=platform,
                    title=release.title,
                    url=release.url,
                    release_date=release.release_date,
                    image_url=release.image_url,
                )
        return None

    async def _tagged(self, platform: str, url: str) -> tuple[str, LatestRelease | None]:
        return platform, await self._lookups[platform](url)
