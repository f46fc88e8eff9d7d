"""MusicBrainz enrichment provider implementing IEnrichmentProvider.

Uses the musicbrainzngs library for the artist search, the artist's URL
relations and its release groups.  musicbrainzngs is synchronous, so each
call runs in a worker thread, and the MusicBrainz rate limit of 1 request
per second is enforced with asyncio-based throttling.

Social links are gathered from three places, first link per platform
wins: MusicBrainz's own relations, then the ``urls`` of the Discogs artist
record, then ``href`` attributes on the official site.
"""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Iterable
from typing import Any
from urllib.parse import urlparse

import httpx
import musicbrainzngs
import structlog

from unstream.config.settings import Settings
from unstream.interfaces.enrichment_provider import IEnrichmentProvider
from unstream.models.entities import EnrichmentData, SocialLink
from unstream.utils.errors import SourceUnavailableError
from unstream.utils.http import fetch_json, fetch_text

logger = structlog.get_logger(logger_name=__name__)

MIN_ARTIST_SCORE = 95
LIBRARY_CUTOFF_YEAR = 2005

_SOCIAL_HOSTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("instagram", ("instagram.com",)),
    ("facebook", ("facebook.com", "fb.com")),
    ("tiktok", ("tiktok.com",)),
    ("youtube", ("youtube.com", "youtu.be")),
    ("threads", ("threads.net", "threads.com")),
    ("bluesky", ("bsky.app", "bsky.social")),
    ("twitter", ("twitter.com", "x.com")),
)
_SOCIAL_RELATION_TYPES = {"social network", "youtube"}
_DISCOGS_ARTIST_ID = re.compile(r"/artist/(\d+)")
_ABSOLUTE_HREF = re.compile(r"href\s*=\s*[\"'](https?://[^\"']+)[\"']", re.IGNORECASE)


def classify_social_url(url: str) -> SocialLink | None:
    """Map *url* to a social platform tag by host, or ``None``."""
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return None
    for platform, domains in _SOCIAL_HOSTS:
        if any(host == domain or host.endswith("." + domain) for domain in domains):
            return SocialLink(platform=platform, url=url)
    return None


def merge_social_links(*groups: Iterable[SocialLink]) -> list[SocialLink]:
    """Concatenate link groups keeping the first link seen per platform."""
    seen: set[str] = set()
    merged: list[SocialLink] = []
    for group in groups:
        for link in group:
            if link.platform not in seen:
                seen.add(link.platform)
                merged.append(link)
    return merged


def social_links_from_urls(urls: Iterable[str]) -> list[SocialLink]:
    return merge_social_links(
        link for link in (classify_social_url(url) for url in urls) if link is not None
    )


def discogs_artist_id(discogs_url: str) -> str | None:
    match = _DISCOGS_ARTIST_ID.search(discogs_url)
    return match.group(1) if match else None


def has_release_before(release_groups: Iterable[dict[str, Any]], year: int = LIBRARY_CUTOFF_YEAR) -> bool:
    """True if any release group first came out before *year*."""
    for group in release_groups:
        first = str(group.get("first-release-date") or "")
        if first[:4].isdigit() and int(first[:4]) < year:
            return True
    return False


class MusicBrainzEnrichmentProvider(IEnrichmentProvider):
    """Artist metadata lookup against MusicBrainz, with Discogs and the
    official site as extra social-link sources.

    MusicBrainz requires clients to identify themselves via a user-agent
    string and to respect the 1 request/second rate limit.

    Attributes
    ----------
    _settings : Settings
        MusicBrainz identity and the enrichment timeout.
    _http : httpx.AsyncClient
        Shared client for the Discogs API and official-site fetches.
    _last_request_time : float
        Monotonic timestamp of the most recent MusicBrainz call.
    """

    _MIN_REQUEST_INTERVAL: float = 1.0

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http_client
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

        musicbrainzngs.set_useragent(
            settings.musicbrainz_app_name,
            settings.musicbrainz_app_version,
            settings.musicbrainz_contact or None,
        )
        logger.info(
            "musicbrainz_provider_initialized",
            app_name=settings.musicbrainz_app_name,
            app_version=settings.musicbrainz_app_version,
        )

    # ------------------------------------------------------------------
    # Rate-limiting helper
    # ------------------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce the MusicBrainz 1 req/sec rate limit."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self._MIN_REQUEST_INTERVAL:
            await asyncio.sleep(self._MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.monotonic()

    async def _call(self, func: Any, *args: Any, **kwargs: Any) -> dict[str, Any]:
        async with self._lock:
            await self._throttle()
            try:
                return await asyncio.to_thread(func, *args, **kwargs)
            except musicbrainzngs.WebServiceError as exc:
                raise SourceUnavailableError(
                    message=f"MusicBrainz request failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

    # ------------------------------------------------------------------
    # IEnrichmentProvider implementation
    # ------------------------------------------------------------------

    async def lookup(self, artist_name: str) -> EnrichmentData:
        """Resolve official, catalog and social links for *artist_name*."""
        empty = EnrichmentData(query=artist_name)

        response = await self._call(musicbrainzngs.search_artists, artist=artist_name, limit=1)
        artists = response.get("artist-list", [])
        if not artists:
            logger.debug("musicbrainz_no_artist", query=artist_name)
            return empty

        artist = artists[0]
        score = int(artist.get("ext:score", 0))
        if score < MIN_ARTIST_SCORE:
            logger.debug("musicbrainz_low_score", query=artist_name, candidate=artist.get("name"), score=score)
            return empty

        details = await self._call(musicbrainzngs.get_artist_by_id, artist["id"], includes=["url-rels"])
        relations = details.get("artist", {}).get("url-relation-list", [])
        official_url = self._first_relation(relations, "official homepage")
        discogs_url = self._first_relation(relations, "discogs")
        mb_socials = social_links_from_urls(
            rel.get("target", "") for rel in relations if rel.get("type") in _SOCIAL_RELATION_TYPES
        )

        groups = await self._call(musicbrainzngs.browse_release_groups, artist=artist["id"], limit=20)
        pre_2005 = has_release_before(groups.get("release-group-list", []))

        discogs_socials, site_socials = await asyncio.gather(
            self._discogs_social_links(discogs_url),
            self._official_site_social_links(official_url),
        )

        result = EnrichmentData(
            query=artist_name,
            artist_name=artist.get("name") or artist_name,
            official_url=official_url,
            discogs_url=discogs_url,
            has_pre_2005_release=pre_2005,
            social_links=merge_social_links(mb_socials, discogs_socials, site_socials),
        )
        logger.info(
            "musicbrainz_enrichment_complete",
            query=artist_name,
            artist=result.artist_name,
            socials=len(result.social_links),
            pre_2005=pre_2005,
        )
        return result

    def get_provider_name(self) -> str:
        """Return the provider identifier."""
        return "musicbrainz"

    # ------------------------------------------------------------------
    # Secondary social-link sources
    # ------------------------------------------------------------------

    @staticmethod
    def _first_relation(relations: list[dict[str, Any]], relation_type: str) -> str | None:
        for rel in relations:
            if rel.get("type") == relation_type and rel.get("target"):
                return rel["target"]
        return None

    async def _discogs_social_links(self, discogs_url: str | None) -> list[SocialLink]:
        artist_id = discogs_artist_id(discogs_url) if discogs_url else None
        if artist_id is None:
            return []
        payload = await fetch_json(
            self._http,
            f"https://api.discogs.com/artists/{artist_id}",
            timeout=self._settings.enrichment_timeout,
            source="discogs",
            headers={"User-Agent": self._settings.discogs_user_agent},
        )
        if not isinstance(payload, dict):
            return []
        return social_links_from_urls(url for url in payload.get("urls", []) if isinstance(url, str))

    async def _official_site_social_links(self, official_url: str | None) -> list[SocialLink]:
        if not official_url:
            return []
        page = await fetch_text(
            self._http,
            official_url,
            timeout=self._settings.page_timeout,
            source="officialsite",
            user_agent=self._settings.http_user_agent,
        )
        if page is None:
            return []
        return social_links_from_urls(_ABSOLUTE_HREF.findall(page))
