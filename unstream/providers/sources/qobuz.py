"""Qobuz adapter: artist search scraping plus album-card release lookup.

Qobuz search pages link artists as ``/us-en/interpreter/<slug>/<id>``.
Slugs are matched strictly against the query (exact, or the query followed
only by a numeric disambiguator such as ``kid-lightbulbs-2``) because the
search is very loose.  The latest release comes from the album search
sorted by release date, reading up to five album cards and the date
printed next to each.
"""

from __future__ import annotations

import asyncio
import datetime
import html as html_lib
import re
from dataclasses import dataclass
from urllib.parse import quote

from unstream.models.entities import LatestRelease, ReleaseType, ResultEntity
from unstream.providers.sources.base import BaseSourceAdapter
from unstream.services.release_extractor import parse_release_date, pick_latest
from unstream.utils.text_normalizer import names_match, normalize_for_comparison, slug_to_title

_BASE_URL = "https://www.qobuz.com"
_INTERPRETER_HREF = re.compile(r"href=\"(/[a-z]{2}-[a-z]{2}/interpreter/([^/\"]+)/(\d+))\"")
_ALBUM_CARD = re.compile(
    r"<a\s+class=\"CoverModelOverlay\"\s+href=\"(/[a-z]{2}-[a-z]{2}/album/[^\"]+)\"\s+"
    r"title=\"More details on (.+?) by ([^\"]+?)\.\""
)
_MONTH_DAY_YEAR = re.compile(
    r"\b(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|Aug(?:ust)?|"
    r"Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\s+(\d{1,2}),?\s+(\d{4})",
    re.IGNORECASE,
)
_ISO_DATE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
_DISAMBIGUATOR = re.compile(r"-\d+$")
_MAX_ARTISTS = 10
_CARD_DATE_WINDOW = 500


@dataclass(frozen=True)
class QobuzArtistLink:
    name: str
    slug: str
    url: str


def slug_matches(slug: str, query: str) -> bool:
    """Strict slug check: exact, or exact plus a numeric disambiguator."""
    key = normalize_for_comparison(query)
    candidate = slug.replace("-", "").lower()
    if not key:
        return False
    return candidate == key or re.fullmatch(re.escape(key) + r"\d+", candidate) is not None


def artist_name_from_slug(slug: str, query: str | None = None) -> str:
    """Display name for an interpreter slug, without Qobuz's numeric disambiguator.

    ``kid-lightbulbs-2`` becomes "Kid Lightbulbs" so the artist folds with
    other platforms.  When *query* matches the slug exactly (``blink-182``
    for "Blink 182") the digits are part of the name and stay.
    """
    if query is not None and slug.replace("-", "").lower() == normalize_for_comparison(query):
        return slug_to_title(slug)
    return slug_to_title(_DISAMBIGUATOR.sub("", slug)) or slug_to_title(slug)


def parse_artist_links(html: str, query: str, limit: int = _MAX_ARTISTS) -> list[QobuzArtistLink]:
    links: list[QobuzArtistLink] = []
    seen: set[str] = set()
    for match in _INTERPRETER_HREF.finditer(html):
        path, slug = match.group(1), match.group(2)
        if path in seen or not slug_matches(slug, query):
            continue
        seen.add(path)
        name = artist_name_from_slug(slug, query)
        links.append(QobuzArtistLink(name=name, slug=slug, url=f"{_BASE_URL}{path}"))
        if len(links) >= limit:
            break
    return links


def _card_date(region: str) -> datetime.date | None:
    month = _MONTH_DAY_YEAR.search(region)
    if month:
        parsed = parse_release_date(f"{month.group(1)} {month.group(2)}, {month.group(3)}")
        if parsed is not None:
            return parsed
    iso = _ISO_DATE.search(region)
    return parse_release_date(iso.group(1)) if iso else None


def parse_album_cards(html: str, artist_name: str, limit: int = 5) -> list[LatestRelease]:
    """Dated album cards by *artist_name*; cards without a readable date are dropped."""
    releases: list[LatestRelease] = []
    for match in _ALBUM_CARD.finditer(html):
        if len(releases) >= limit:
            break
        path, title, card_artist = match.group(1), match.group(2), match.group(3)
        if not names_match(artist_name, html_lib.unescape(card_artist)):
            continue
        release_date = _card_date(html[match.end(): match.end() + _CARD_DATE_WINDOW])
        if release_date is None:
            continue
        releases.append(
            LatestRelease(
                title=html_lib.unescape(title).strip(),
                type=ReleaseType.ALBUM,
                url=f"{_BASE_URL}{path}",
                release_date=release_date,
            )
        )
    return releases


class QobuzAdapter(BaseSourceAdapter):
    """Artist-page scraping adapter for qobuz.com."""

    @property
    def source_id(self) -> str:
        return "qobuz"

    async def _search(self, query: str) -> list[ResultEntity]:
        page = await self._fetch(self._registry.search_url(self.source_id, query))
        if page is None:
            return []

        links = parse_artist_links(page, query)[: self._settings.max_release_lookups]
        releases = await asyncio.gather(*(self.latest_release(link.name) for link in links))
        return [
            self._entity(name=link.name, url=link.url, latest_release=release)
            for link, release in zip(links, releases)
        ]

    async def latest_release(self, artist_name: str) -> LatestRelease | None:
        url = (
            f"{_BASE_URL}/us-en/search/albums/{quote(artist_name, safe='')}"
            "?ssf%5Bs%5D=main_catalog_date_desc"
        )
        page = await self._fetch(url, timeout=self._settings.page_timeout)
        if page is None:
            return None
        return pick_latest(
            parse_album_cards(page, artist_name, self._settings.max_release_candidates)
        )
