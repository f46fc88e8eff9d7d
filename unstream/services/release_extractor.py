"""Tolerant release extraction from platform pages and syndication feeds.

Platform markup is unversioned and drifts, so every field is extracted by
an ordered list of small pure strategies (``str -> str | None``) tried in
sequence; the first non-empty answer wins.  Each strategy is usable and
testable on its own.

Two entry points feed the adapters:

- :func:`parse_release_page` turns one album/track page into a
  :class:`LatestRelease`, raising :class:`ExtractionError` when the title
  or a parseable date is missing.
- :func:`extract_feed_items` turns an RSS document into
  :class:`FeedItem` records, silently skipping items that fail to parse.

:func:`pick_latest` then selects the newest dated candidate.  Undated
candidates are never chosen as "latest".
"""

from __future__ import annotations

import datetime
import html as html_lib
import json
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import structlog

from unstream.models.entities import LatestRelease, ReleaseType
from unstream.utils.errors import ExtractionError
from unstream.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

Strategy = Callable[[str], "str | None"]

MAX_RELEASE_CANDIDATES = 5

# Order matters: the first format that parses wins.
PAGE_DATE_FORMATS: tuple[str, ...] = (
    "%d %b %Y %H:%M:%S %Z",
    "%d %b %Y %H:%M:%S",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%Y-%m-%d",
)

FEED_DATE_FORMATS: tuple[str, ...] = (
    "%a, %d %b %Y %H:%M:%S %Z",
    "%a, %d %b %Y %H:%M:%S %z",
    "%a, %d %b %Y %H:%M:%S",
    "%d %b %Y %H:%M:%S %Z",
    "%d %b %Y %H:%M:%S %z",
    "%d %b %Y %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d",
)

_TRAILING_TZ_NAME = re.compile(r"\s+[A-Z]{2,5}$")


# ---------------------------------------------------------------------------
# Date parsing
# ---------------------------------------------------------------------------


def _parse_with_formats(value: str, formats: Sequence[str]) -> datetime.date | None:
    cleaned = re.sub(r"\s+", " ", value.strip())
    if not cleaned:
        return None
    candidates = [cleaned]
    # strptime's %Z only knows UTC/GMT; "PST" and friends retry without it.
    stripped = _TRAILING_TZ_NAME.sub("", cleaned)
    if stripped != cleaned:
        candidates.append(stripped)
    for candidate in candidates:
        for fmt in formats:
            try:
                return datetime.datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue
    return None


def parse_release_date(value: str) -> datetime.date | None:
    """Parse a date as it appears on a release page.

    Accepts ``"28 Dec 2007 00:00:00 GMT"``, ``"January 10, 2025"``,
    ``"January 6, 2025"``, ``"Jan 10, 2025"`` and ISO ``"2025-01-10"``.
    """
    return _parse_with_formats(value, PAGE_DATE_FORMATS)


def parse_feed_date(value: str) -> datetime.date | None:
    """Parse a feed ``pubDate``.

    Accepts RFC 822 with or without the weekday (``"Fri, 10 Jan 2025
    00:00:00 GMT"``, ``"10 Jan 2025 00:00:00 +0000"``), ISO 8601 with an
    offset and plain ``"YYYY-MM-DD"``.
    """
    return _parse_with_formats(value, FEED_DATE_FORMATS)


# ---------------------------------------------------------------------------
# Field strategies
# ---------------------------------------------------------------------------


def first_match(text: str, strategies: Iterable[Strategy]) -> str | None:
    """Return the first non-empty strategy result, or ``None``."""
    for strategy in strategies:
        value = strategy(text)
        if value:
            return value
    return None


def meta_content(page: str, prop: str) -> str | None:
    """Read a ``<meta property|name=... content=...>`` value.

    Handles both attribute orders and either quote style per attribute.
    """
    escaped = re.escape(prop)
    patterns = (
        rf"<meta\b[^>]*?\b(?:property|name)\s*=\s*[\"']{escaped}[\"'][^>]*?\bcontent\s*=\s*(\"|')(.*?)\1",
        rf"<meta\b[^>]*?\bcontent\s*=\s*(\"|')(.*?)\1[^>]*?\b(?:property|name)\s*=\s*[\"']{escaped}[\"']",
    )
    for pattern in patterns:
        match = re.search(pattern, page, re.IGNORECASE | re.DOTALL)
        if match and match.group(2).strip():
            return html_lib.unescape(match.group(2).strip())
    return None


def clean_og_title(title: str) -> str:
    """Drop a trailing ``"| Artist"`` or ``", by Artist"`` from a page title."""
    if "|" in title:
        title = title.split("|", 1)[0]
    by = re.search(r",\s*by\s+", title, re.IGNORECASE)
    if by:
        title = title[: by.start()]
    return title.strip()


def og_title(page: str) -> str | None:
    raw = meta_content(page, "og:title")
    return clean_og_title(raw) if raw else None


def _json_ld_blocks(page: str) -> list[object]:
    blocks: list[object] = []
    for raw in re.findall(
        r"<script[^>]*application/ld\+json[^>]*>(.*?)</script>", page, re.IGNORECASE | re.DOTALL
    ):
        try:
            blocks.append(json.loads(raw))
        except ValueError:
            continue
    return blocks


def json_ld_name(page: str) -> str | None:
    """The ``name`` of the first JSON-LD object on the page."""
    for block in _json_ld_blocks(page):
        items = block if isinstance(block, list) else [block]
        for item in items:
            if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"].strip():
                return html_lib.unescape(item["name"].strip())
    # Invalid JSON-LD still usually has a greppable name field.
    match = re.search(r'"name"\s*:\s*"([^"]+)"', page)
    return html_lib.unescape(match.group(1).strip()) if match else None


def date_published(page: str) -> str | None:
    match = re.search(r'"datePublished"\s*:\s*"([^"]+)"', page)
    return match.group(1).strip() if match else None


def released_phrase(page: str) -> str | None:
    """Free-text ``"released January 10, 2025"``."""
    match = re.search(r"released\s+([A-Za-z]+\.?\s+\d{1,2},?\s+\d{4})", page, re.IGNORECASE)
    if not match:
        return None
    return match.group(1).replace(".", "").strip()


def og_image(page: str) -> str | None:
    return meta_content(page, "og:image")


TITLE_STRATEGIES: tuple[Strategy, ...] = (og_title, json_ld_name)
DATE_STRATEGIES: tuple[Strategy, ...] = (date_published, released_phrase)


# ---------------------------------------------------------------------------
# Release pages
# ---------------------------------------------------------------------------


_RELEASE_HREF = re.compile(
    r"href\s*=\s*[\"']((?:https?://[^\"'/\s]+)?/(?:album|track)/[^\"'?#\s]+)",
    re.IGNORECASE,
)


def extract_release_links(
    page: str, base_url: str, limit: int = MAX_RELEASE_CANDIDATES
) -> list[str]:
    """Collect up to *limit* album/track URLs from an artist catalog page.

    Relative (``/album/x``) and absolute (``https://host/album/x``)
    anchors are both accepted; absolute links to another host are ignored.
    Order of first appearance is kept.
    """
    base_host = urlparse(base_url).netloc.lower()
    links: list[str] = []
    for match in _RELEASE_HREF.finditer(page):
        href = html_lib.unescape(match.group(1))
        absolute = urljoin(base_url.rstrip("/") + "/", href)
        if urlparse(absolute).netloc.lower() != base_host:
            continue
        if absolute not in links:
            links.append(absolute)
        if len(links) >= limit:
            break
    return links


def release_type_for_url(url: str) -> ReleaseType:
    return ReleaseType.TRACK if "/track/" in url else ReleaseType.ALBUM


def parse_release_page(page: str, url: str, source: str | None = None) -> LatestRelease:
    """Extract a dated release from one album/track page.

    Raises:
        ExtractionError: If no title or no parseable release date is found.
    """
    title = first_match(page, TITLE_STRATEGIES)
    if not title:
        raise ExtractionError(f"No release title at {url}", provider_name=source)

    raw_dates = [value for value in (strategy(page) for strategy in DATE_STRATEGIES) if value]
    if not raw_dates:
        raise ExtractionError(f"No release date at {url}", provider_name=source)
    release_date = next(
        (parsed for parsed in map(parse_release_date, raw_dates) if parsed is not None), None
    )
    if release_date is None:
        raise ExtractionError(f"Unrecognised date {raw_dates[0]!r} at {url}", provider_name=source)

    return LatestRelease(
        title=title,
        type=release_type_for_url(url),
        url=url,
        image_url=og_image(page),
        release_date=release_date,
    )


# ---------------------------------------------------------------------------
# Feeds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeedItem:
    """One dated ``<item>`` from an RSS feed."""

    title: str
    link: str
    published: datetime.date
    image_url: str | None = None

    def to_release(self) -> LatestRelease:
        return LatestRelease(
            title=self.title,
            type=release_type_for_url(self.link),
            url=self.link,
            image_url=self.image_url,
            release_date=self.published,
        )


def feed_tag(block: str, tag: str) -> str | None:
    """Value of ``<tag>`` inside *block*, literal or CDATA-wrapped, entity-decoded."""
    match = re.search(
        rf"<{re.escape(tag)}(?:\s[^>]*)?>\s*(?:<!\[CDATA\[(.*?)\]\]>|(.*?))\s*</{re.escape(tag)}>",
        block,
        re.IGNORECASE | re.DOTALL,
    )
    if not match:
        return None
    value = match.group(1) if match.group(1) is not None else match.group(2)
    value = html_lib.unescape(value).strip()
    return value or None


def _feed_image(block: str) -> str | None:
    match = re.search(
        r"<(?:enclosure|media:content|media:thumbnail|itunes:image)\b[^>]*?\b(?:url|href)\s*=\s*[\"']([^\"']+)",
        block,
        re.IGNORECASE,
    )
    return html_lib.unescape(match.group(1)) if match else None


def parse_feed_item(block: str) -> FeedItem:
    """Parse one ``<item>`` body.

    Raises:
        ExtractionError: If the title, link or a parseable date is missing.
    """
    title = feed_tag(block, "title")
    link = feed_tag(block, "link") or feed_tag(block, "guid")
    raw_date = feed_tag(block, "pubDate") or feed_tag(block, "dc:date") or feed_tag(block, "published")
    if not title or not link:
        raise ExtractionError("Feed item without title or link")
    if not raw_date:
        raise ExtractionError(f"Feed item {title!r} has no date")
    published = parse_feed_date(raw_date)
    if published is None:
        raise ExtractionError(f"Feed item {title!r} has unrecognised date {raw_date!r}")
    return FeedItem(title=title, link=link, published=published, image_url=_feed_image(block))


def extract_feed_items(feed: str, source: str | None = None) -> list[FeedItem]:
    """Every parseable item in an RSS document, in document order."""
    items: list[FeedItem] = []
    for block in re.findall(r"<item\b[^>]*>(.*?)</item>", feed, re.IGNORECASE | re.DOTALL):
        try:
            items.append(parse_feed_item(block))
        except ExtractionError as exc:
            _logger.debug("feed_item_skipped", source=source, error=str(exc))
    return items


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def pick_latest(releases: Iterable[LatestRelease | None]) -> LatestRelease | None:
    """Newest dated release; ties keep the earliest candidate."""
    latest: LatestRelease | None = None
    for release in releases:
        if release is None or release.release_date is None:
            continue
        if latest is None or release.release_date > latest.release_date:
            latest = release
    return latest
