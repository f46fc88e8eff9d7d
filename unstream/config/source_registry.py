"""The Source Registry: a static, read-only catalog of known platforms.

Built once at import time and exposed as a :class:`SourceRegistry` wrapping
a ``MappingProxyType``, so concurrent adapters can read it without any
locking and nothing can add or replace a platform at runtime.

Placeholders: ``{query}`` in ``search_url_template`` is replaced with the
URL-encoded query; ``{slug}`` in ``artist_url_template`` with the artist
slug for platforms that have a predictable artist path.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from urllib.parse import quote, quote_plus

from unstream.models.entities import Source, SourceCategory

# Fixed precedence tables used when ordering a result's platform links.
OFFICIAL_ORDER: tuple[str, ...] = ("officialsite", "discogs", "hoopla", "freegal")
SOCIAL_ORDER: tuple[str, ...] = (
    "instagram",
    "facebook",
    "tiktok",
    "youtube",
    "threads",
    "bluesky",
    "twitter",
)
LIBRARY_SOURCE_IDS: tuple[str, ...] = ("hoopla", "freegal")

_SOURCES: tuple[Source, ...] = (
    # -- Marketplaces --
    Source(
        id="bandcamp",
        name="Bandcamp",
        description="Artist-friendly music marketplace",
        category=SourceCategory.MARKETPLACE,
        color="#1da0c3",
        homepage_url="https://bandcamp.com",
        has_embed=True,
        search_url_template="https://bandcamp.com/search?q={query}",
    ),
    Source(
        id="mirlo",
        name="Mirlo",
        description="Open source patronage platform",
        category=SourceCategory.MARKETPLACE,
        color="#be3455",
        homepage_url="https://mirlo.space",
        search_url_template="https://mirlo.space/search?query={query}",
        artist_url_template="https://mirlo.space/{slug}",
    ),
    Source(
        id="qobuz",
        name="Qobuz",
        description="Hi-res music downloads store",
        category=SourceCategory.MARKETPLACE,
        color="#4169e1",
        homepage_url="https://www.qobuz.com",
        search_url_template="https://www.qobuz.com/us-en/search/artists/{query}",
    ),
    Source(
        id="ampwall",
        name="Ampwall",
        description="Modern independent music platform",
        category=SourceCategory.MARKETPLACE,
        color="#ef4444",
        homepage_url="https://ampwall.com",
        search_only=True,
        search_url_template="https://ampwall.com/explore?searchStyle=search&query={query}",
    ),
    Source(
        id="sonica",
        name="Sonica",
        description="Artist-owned music platform",
        category=SourceCategory.MARKETPLACE,
        color="#10b981",
        homepage_url="https://sonica.music",
        search_only=True,
        search_url_template="https://sonica.music/search/{query}",
    ),
    Source(
        id="nina",
        name="Nina",
        description="Independent music protocol",
        category=SourceCategory.MARKETPLACE,
        color="#000000",
        homepage_url="https://www.ninaprotocol.com",
        search_only=True,
        search_url_template="https://www.ninaprotocol.com/search?query={query}",
    ),
    # -- Decentralized --
    Source(
        id="bandwagon",
        name="Bandwagon",
        description="ActivityPub-based music community",
        category=SourceCategory.DECENTRALIZED,
        color="#ff6b35",
        homepage_url="https://bandwagon.fm",
        search_url_template="https://bandwagon.fm/artists?q={query}",
    ),
    Source(
        id="faircamp",
        name="Faircamp",
        description="Decentralized static music sites",
        category=SourceCategory.DECENTRALIZED,
        color="#2d5a27",
        homepage_url="https://simonrepp.com/faircamp",
        search_url_template="https://duckduckgo.com/?q=site:*.faircamp+{query}",
    ),
    Source(
        id="jamcoop",
        name="Jam.coop",
        description="Cooperatively owned music store",
        category=SourceCategory.DECENTRALIZED,
        color="#f59e0b",
        homepage_url="https://jam.coop",
        search_url_template="https://jam.coop/artists?q={query}",
    ),
    # -- Patronage --
    Source(
        id="patreon",
        name="Patreon",
        description="Creator subscription platform",
        category=SourceCategory.PATRONAGE,
        color="#ff424d",
        homepage_url="https://www.patreon.com",
        search_url_template="https://www.patreon.com/search?q={query}",
    ),
    Source(
        id="kofi",
        name="Ko-fi",
        description="Creator tip jar and shop",
        category=SourceCategory.PATRONAGE,
        color="#29abe0",
        homepage_url="https://ko-fi.com",
        search_only=True,
        search_url_template="https://duckduckgo.com/?q=site:ko-fi.com+{query}",
    ),
    Source(
        id="buymeacoffee",
        name="Buy Me a Coffee",
        description="Creator support platform",
        category=SourceCategory.PATRONAGE,
        color="#ffdd00",
        homepage_url="https://buymeacoffee.com",
        search_only=True,
        search_url_template="https://buymeacoffee.com/explore-creators?q={query}",
    ),
    # -- Library services --
    Source(
        id="hoopla",
        name="Hoopla",
        description="Library streaming service",
        category=SourceCategory.LIBRARY,
        color="#e31837",
        homepage_url="https://www.hoopladigital.com",
        search_only=True,
        search_url_template="https://www.hoopladigital.com/search?q={query}&type=music",
    ),
    Source(
        id="freegal",
        name="Freegal",
        description="Free library music streaming",
        category=SourceCategory.LIBRARY,
        color="#00a651",
        homepage_url="https://www.freegalmusic.com",
        search_only=True,
        search_url_template="https://www.freegalmusic.com/search-page/{query}",
    ),
    # -- Official / catalog --
    Source(
        id="officialsite",
        name="Official Site",
        description="Artist's official website",
        category=SourceCategory.OFFICIAL,
    ),
    Source(
        id="discogs",
        name="Discogs",
        description="Music catalog database",
        category=SourceCategory.OFFICIAL,
        color="#333333",
        homepage_url="https://www.discogs.com",
        search_url_template="https://www.discogs.com/search/?q={query}&type=artist",
    ),
    # -- Social --
    Source(
        id="instagram",
        name="Instagram",
        category=SourceCategory.SOCIAL,
        color="#e4405f",
        search_url_template="https://duckduckgo.com/?q=site:instagram.com+{query}",
    ),
    Source(
        id="facebook",
        name="Facebook",
        category=SourceCategory.SOCIAL,
        color="#1877f2",
        search_url_template="https://duckduckgo.com/?q=site:facebook.com+{query}",
    ),
    Source(
        id="tiktok",
        name="TikTok",
        category=SourceCategory.SOCIAL,
        color="#000000",
        search_url_template="https://duckduckgo.com/?q=site:tiktok.com+{query}",
    ),
    Source(
        id="youtube",
        name="YouTube",
        category=SourceCategory.SOCIAL,
        color="#ff0000",
        search_url_template="https://www.youtube.com/results?search_query={query}",
    ),
    Source(
        id="threads",
        name="Threads",
        category=SourceCategory.SOCIAL,
        color="#000000",
        search_url_template="https://duckduckgo.com/?q=site:threads.net+{query}",
    ),
    Source(
        id="bluesky",
        name="Bluesky",
        category=SourceCategory.SOCIAL,
        color="#0085ff",
        search_url_template="https://bsky.app/search?q={query}",
    ),
    Source(
        id="twitter",
        name="X",
        category=SourceCategory.SOCIAL,
        color="#000000",
        search_url_template="https://duckduckgo.com/?q=site:x.com+{query}",
    ),
)


class SourceRegistry(Mapping[str, Source]):
    """Immutable id -> :class:`Source` mapping with template helpers.

    Implements the read-only ``Mapping`` protocol so callers can use
    ``in``, ``[]``, iteration and ``len`` directly.
    """

    def __init__(self, sources: tuple[Source, ...] | list[Source]) -> None:
        by_id: dict[str, Source] = {}
        for source in sources:
            if source.id in by_id:
                raise ValueError(f"Duplicate source id: {source.id}")
            by_id[source.id] = source
        self._sources: Mapping[str, Source] = MappingProxyType(by_id)

    def __getitem__(self, source_id: str) -> Source:
        return self._sources[source_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def by_category(self, category: SourceCategory) -> list[Source]:
        return [s for s in self._sources.values() if s.category == category]

    def search_only_ids(self) -> list[str]:
        return [s.id for s in self._sources.values() if s.search_only]

    def search_url(self, source_id: str, query: str) -> str | None:
        """Build the platform search URL for *query*, or ``None`` if it has none."""
        source = self._sources.get(source_id)
        if source is None or not source.search_url_template:
            return None
        # Path-style templates need %20, query-string templates take "+".
        template = source.search_url_template
        placeholder_in_path = "?" not in template.split("{query}", 1)[0]
        encoded = quote(query, safe="") if placeholder_in_path else quote_plus(query)
        return template.replace("{query}", encoded)

    def artist_url(self, source_id: str, slug: str) -> str | None:
        """Build the direct artist-page URL for platforms with a fixed path convention."""
        source = self._sources.get(source_id)
        if source is None or not source.artist_url_template or not slug:
            return None
        return source.artist_url_template.replace("{slug}", slug)


SOURCE_REGISTRY = SourceRegistry(_SOURCES)
