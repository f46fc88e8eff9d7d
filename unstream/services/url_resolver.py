"""Resolve a Spotify or Apple Music link to the artist name it belongs to.

Used to seed a search from a pasted streaming link.  Artist pages carry
the name in ``og:title``; album and track pages need one of several
fallbacks (``og:description`` "by X", an artist anchor, the ``<title>``,
or Apple's ``twitter:audio:artist_name``).
"""

from __future__ import annotations

import html as html_lib
import re
from collections.abc import Callable

import httpx
import structlog

from unstream.config.settings import Settings
from unstream.models.entities import EntityType, ResolvedArtist
from unstream.services.release_extractor import first_match, meta_content
from unstream.utils.errors import InvalidURLError
from unstream.utils.http import fetch_text
from unstream.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_SPOTIFY_URL = re.compile(r"open\.spotify\.com/(?:intl-[a-z]{2}/)?(artist|album|track)/([A-Za-z0-9]+)")
_SPOTIFY_URI = re.compile(r"^spotify:(artist|album|track):([A-Za-z0-9]+)$")
_APPLE_URL = re.compile(r"music\.apple\.com/[a-z]{2}/(artist|album|song)/([^/]+)/(\d+)")
_APPLE_SUFFIXES = (
    re.compile(r"\s+on\s+Apple\s*Music.*$", re.IGNORECASE),
    re.compile(r"\s*[-–—]\s*Apple\s*Music.*$", re.IGNORECASE),
    re.compile(r"\s*\|\s*Apple\s*Music.*$", re.IGNORECASE),
)

_ENTITY_TYPES = {
    "artist": EntityType.ARTIST,
    "album": EntityType.ALBUM,
    "track": EntityType.TRACK,
    "song": EntityType.TRACK,
}


def normalize_spotify_url(url: str) -> str:
    """``spotify:artist:ID`` URIs become ``https://open.spotify.com/artist/ID``."""
    match = _SPOTIFY_URI.match(url.strip())
    if match:
        return f"https://open.spotify.com/{match.group(1)}/{match.group(2)}"
    return url.strip()


def strip_apple_suffix(name: str) -> str:
    for pattern in _APPLE_SUFFIXES:
        name = pattern.sub("", name)
    return name.strip()


# -- Spotify strategies ------------------------------------------------------


def spotify_description_artist(page: str) -> str | None:
    description = meta_content(page, "og:description")
    if not description:
        return None
    match = re.search(r"(?:\bby|\bfrom)\s+([^·]+)", description, re.IGNORECASE)
    return match.group(1).strip() if match else None


def spotify_anchor_artist(page: str) -> str | None:
    match = re.search(r"href=\"/artist/[^\"]+\">([^<]+)</a>", page)
    return html_lib.unescape(match.group(1)).strip() if match else None


def spotify_title_artist(page: str) -> str | None:
    """``"Song - Artist - Spotify"`` style ``<title>``."""
    match = re.search(r"<title>([^<]+)</title>", page, re.IGNORECASE)
    if not match:
        return None
    parts = re.split(r"\s*[-–—]\s*", html_lib.unescape(match.group(1)))
    if len(parts) < 2:
        return None
    artist = parts[1].strip()
    if not artist or artist.lower() == "spotify":
        return None
    return artist


# -- Apple Music strategies --------------------------------------------------


def apple_title_artist(page: str) -> str | None:
    """``"Song by Artist on Apple Music"`` og:title."""
    title = meta_content(page, "og:title")
    if not title:
        return None
    match = re.match(r"^.+?\s+by\s+(.+)$", strip_apple_suffix(title), re.IGNORECASE)
    return strip_apple_suffix(match.group(1)) if match else None


def apple_meta_artist(page: str) -> str | None:
    name = meta_content(page, "twitter:audio:artist_name")
    return strip_apple_suffix(name) if name else None


SPOTIFY_RELEASE_STRATEGIES: tuple[Callable[[str], str | None], ...] = (
    spotify_description_artist,
    spotify_anchor_artist,
    spotify_title_artist,
)
APPLE_RELEASE_STRATEGIES: tuple[Callable[[str], str | None], ...] = (
    apple_title_artist,
    apple_meta_artist,
)


class UrlResolver:
    """Streaming-link to artist-name resolver."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self._http = http_client
        self._settings = settings or Settings()

    @staticmethod
    def classify(url: str) -> tuple[str, str, str]:
        """Return ``(platform, kind, normalized_url)`` for a supported link.

        Raises:
            InvalidURLError: If the URL is empty or not a Spotify/Apple Music link.
        """
        if not url or not url.strip():
            raise InvalidURLError("URL is empty")
        normalized = normalize_spotify_url(url)
        spotify = _SPOTIFY_URL.search(normalized)
        if spotify:
            return "spotify", spotify.group(1), normalized
        apple = _APPLE_URL.search(normalized)
        if apple:
            return "apple", apple.group(1), normalized
        raise InvalidURLError(f"Unsupported streaming URL: {url!r}")

    async def resolve(self, url: str) -> ResolvedArtist | None:
        """Artist behind *url*, or ``None`` when the page gives no name.

        Raises:
            InvalidURLError: If the URL is not a supported streaming link.
        """
        platform, kind, normalized = self.classify(url)
        page = await fetch_text(
            self._http,
            normalized,
            timeout=self._settings.page_timeout,
            source=platform,
            user_agent=self._settings.http_user_agent,
        )
        if page is None:
            return None

        if kind == "artist":
            name = meta_content(page, "og:title")
            if name and platform == "apple":
                name = strip_apple_suffix(name)
        else:
            strategies = SPOTIFY_RELEASE_STRATEGIES if platform == "spotify" else APPLE_RELEASE_STRATEGIES
            name = first_match(page, strategies)

        if not name:
            _logger.info("url_unresolved", platform=platform, url=normalized)
            return None
        return ResolvedArtist(
            artist_name=name,
            platform=platform,
            entity_type=_ENTITY_TYPES[kind],
            url=normalized,
        )
