"""Turn one Bandcamp page URL into an EmbeddedPlayer widget URL.

Item pages (``/album/...``, ``/track/...``) are read directly.  Artist
pages are resolved to their first album or track link first; an artist
with a single track and no listing exposes the track id on the page
itself.  The numeric item id is found by an ordered list of fallback
patterns, first match wins.
"""

from __future__ import annotations

import html as html_lib
import re
from collections.abc import Callable
from urllib.parse import urljoin, urlparse

import httpx
import structlog

from unstream.config.settings import Settings
from unstream.models.entities import EmbedResult, EmbedStatus, ReleaseType
from unstream.utils.errors import InvalidURLError
from unstream.utils.http import fetch_text
from unstream.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

EMBED_URL_TEMPLATE = (
    "https://bandcamp.com/EmbeddedPlayer/{item_type}={item_id}"
    "/size=small/bgcol=ffffff/linkcol=0687f5/transparent=true/"
)
DEFAULT_TITLE = "Music"

IdPattern = Callable[[str, str], "str | None"]


def _search(pattern: str, page: str) -> str | None:
    match = re.search(pattern, page)
    return match.group(1) if match else None


def tralbum_param_id(page: str, item_type: str) -> str | None:
    """``"tralbum_param":{"name":"album","value":123}``"""
    return _search(
        rf'"tralbum_param"\s*:\s*\{{\s*"name"\s*:\s*"{item_type}"\s*,\s*"value"\s*:\s*(\d+)', page
    )


def query_style_id(page: str, item_type: str) -> str | None:
    """``album=123`` as found in existing embed URLs."""
    return _search(rf"\b{item_type}=(\d+)", page)


def data_attribute_id(page: str, item_type: str) -> str | None:
    return _search(rf'data-item-id\s*=\s*"{item_type}-(\d+)"', page)


def json_field_id(page: str, item_type: str) -> str | None:
    return _search(rf'"{item_type}_id"\s*:\s*(\d+)', page)


def current_object_id(page: str, item_type: str) -> str | None:
    return _search(r'"current"\s*:\s*\{[^}]*?"id"\s*:\s*(\d+)', page)


ID_PATTERNS: tuple[IdPattern, ...] = (
    tralbum_param_id,
    query_style_id,
    data_attribute_id,
    json_field_id,
    current_object_id,
)


def extract_item_id(page: str, item_type: str) -> str | None:
    for pattern in ID_PATTERNS:
        item_id = pattern(page, item_type)
        if item_id:
            return item_id
    return None


def is_explicitly_unembeddable(page: str) -> bool:
    return re.search(r'"public_embeddable"\s*:\s*false', page) is not None


def page_title(page: str) -> str:
    """``<title>`` text up to the first ``|``."""
    match = re.search(r"<title[^>]*>([^<]+)</title>", page, re.IGNORECASE)
    if not match:
        return DEFAULT_TITLE
    title = html_lib.unescape(match.group(1)).split("|", 1)[0].strip()
    return title or DEFAULT_TITLE


def item_type_for_url(url: str) -> ReleaseType | None:
    path = urlparse(url).path
    if "/album/" in path:
        return ReleaseType.ALBUM
    if "/track/" in path:
        return ReleaseType.TRACK
    return None


def first_item_path(page: str) -> tuple[str, ReleaseType] | None:
    """First album link on an artist page, else the first track link."""
    for item_type in (ReleaseType.ALBUM, ReleaseType.TRACK):
        match = re.search(rf"href\s*=\s*[\"']((?:https?://[^\"'/]+)?/{item_type.value}/[^\"'?#]+)", page)
        if match:
            return html_lib.unescape(match.group(1)), item_type
    return None


def artist_base_url(url: str) -> str:
    base = url.rstrip("/")
    return base[: -len("/music")] if base.endswith("/music") else base


def embed_url_for(item_type: ReleaseType, item_id: str) -> str:
    return EMBED_URL_TEMPLATE.format(item_type=item_type.value, item_id=item_id)


def validate_page_url(url: str) -> str:
    """Return *url* stripped, or raise for anything that is not an http(s) page URL.

    Raises:
        InvalidURLError: If the URL is empty, relative or not http(s).
    """
    if not url or not url.strip():
        raise InvalidURLError("URL is empty")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidURLError(f"Not an http(s) URL: {url!r}")
    return url


class EmbedResolver:
    """On-demand embed lookup for one result link.

    Not found, not embeddable and found are all ordinary outcomes; only a
    malformed URL raises.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self._http = http_client
        self._settings = settings or Settings()

    async def _get(self, url: str) -> str | None:
        return await fetch_text(
            self._http,
            url,
            timeout=self._settings.embed_timeout,
            source="embed",
            user_agent=self._settings.http_user_agent,
        )

    def _from_item_page(self, page: str, item_type: ReleaseType, url: str) -> EmbedResult:
        if is_explicitly_unembeddable(page):
            _logger.info("embed_not_embeddable", url=url)
            return EmbedResult(status=EmbedStatus.NOT_EMBEDDABLE, item_type=item_type)
        item_id = extract_item_id(page, item_type.value)
        if item_id is None:
            _logger.debug("embed_id_not_found", url=url)
            return EmbedResult(status=EmbedStatus.NOT_FOUND)
        return EmbedResult(
            status=EmbedStatus.FOUND,
            embed_url=embed_url_for(item_type, item_id),
            title=page_title(page),
            item_type=item_type,
            item_id=item_id,
        )

    async def resolve(self, url: str) -> EmbedResult:
        """Resolve *url* (artist, album or track page) to an embed descriptor.

        Raises:
            InvalidURLError: If *url* is not an http(s) URL.
        """
        url = validate_page_url(url)
        page = await self._get(url)
        if page is None:
            return EmbedResult(status=EmbedStatus.NOT_FOUND)

        item_type = item_type_for_url(url)
        if item_type is not None:
            return self._from_item_page(page, item_type, url)

        found = first_item_path(page)
        if found is None:
            track_id = data_attribute_id(page, ReleaseType.TRACK.value)
            if track_id is None:
                return EmbedResult(status=EmbedStatus.NOT_FOUND)
            return EmbedResult(
                status=EmbedStatus.FOUND,
                embed_url=embed_url_for(ReleaseType.TRACK, track_id),
                title=page_title(page),
                item_type=ReleaseType.TRACK,
                item_id=track_id,
            )

        path, item_type = found
        item_url = urljoin(artist_base_url(url) + "/", path)
        item_page = await self._get(item_url)
        if item_page is None:
            return EmbedResult(status=EmbedStatus.NOT_FOUND)
        return self._from_item_page(item_page, item_type, item_url)
