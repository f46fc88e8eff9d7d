"""Core domain entities for the unstream search engine.

Defines enums and Pydantic v2 models for the platform catalog, the
per-platform links and releases adapters produce, the merged result
entities returned to consumers, and the enrichment payload fetched in the
slower second phase.  All models are frozen: a merge step never edits a
delivered object, it builds a new one with ``model_copy(update=...)``.

Key relationships:
    - SearchResponse has many ResultEntity objects
    - ResultEntity has many PlatformLink objects (at most one per source id)
    - PlatformLink optionally carries the LatestRelease its adapter found
    - EnrichmentData is merged into a SearchResponse by
      unstream/services/enrichment_merger.py
"""

from __future__ import annotations

import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SourceCategory(str, Enum):  # noqa: UP042
    """Platform families.  Drives display grouping and link precedence."""

    MARKETPLACE = "marketplace"
    PATRONAGE = "patronage"
    LIBRARY = "library"
    DECENTRALIZED = "decentralized"
    OFFICIAL = "official"
    SOCIAL = "social"


class EntityType(str, Enum):  # noqa: UP042
    """What a ResultEntity represents."""

    ARTIST = "artist"
    ALBUM = "album"
    TRACK = "track"


class ReleaseType(str, Enum):  # noqa: UP042
    ALBUM = "album"
    TRACK = "track"


class MatchConfidence(str, Enum):  # noqa: UP042
    """Cross-platform confidence label.

    ``VERIFIED`` means two or more platforms reported the same latest
    release.  ``UNVERIFIED`` means the entity only matched by name.  An
    entity with no label (``None``) came from a single query with no
    conflicting signal.
    """

    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class EmbedStatus(str, Enum):  # noqa: UP042
    FOUND = "found"
    NOT_EMBEDDABLE = "not_embeddable"
    NOT_FOUND = "not_found"


# ---------------------------------------------------------------------------
# Platform catalog
# ---------------------------------------------------------------------------

class Source(BaseModel):
    """Static descriptor of one platform in the Source Registry.

    ``search_url_template`` and ``artist_url_template`` contain a
    ``{query}`` / ``{slug}`` placeholder respectively.  ``search_only``
    sources can never confirm that an artist exists; they only ever
    contribute a search link.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: SourceCategory
    color: str = "#71717a"
    homepage_url: str = ""
    has_embed: bool = False
    search_only: bool = False
    search_url_template: str = ""
    artist_url_template: str = ""


# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------

class LatestRelease(BaseModel):
    """The most recent album or track one platform lists for an artist."""

    model_config = ConfigDict(frozen=True)

    title: str
    type: ReleaseType = ReleaseType.ALBUM
    url: str
    image_url: str | None = None
    release_date: datetime.date | None = None


class PlatformLink(BaseModel):
    """One platform's page for a ResultEntity."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    url: str
    latest_release: LatestRelease | None = None


class ResultEntity(BaseModel):
    """A canonical artist, album or track with its platform links.

    ``name``, ``artist`` and ``type`` are fixed at creation; merges only
    ever produce copies with a different ``platforms`` list,
    ``image_url`` or ``match_confidence``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    artist: str | None = None
    type: EntityType = EntityType.ARTIST
    image_url: str | None = None
    platforms: list[PlatformLink] = Field(default_factory=list)
    match_confidence: MatchConfidence | None = None

    @property
    def source_ids(self) -> list[str]:
        return [p.source_id for p in self.platforms]

    def link_for(self, source_id: str) -> PlatformLink | None:
        for link in self.platforms:
            if link.source_id == source_id:
                return link
        return None


class SearchResponse(BaseModel):
    """The external contract of one search.

    ``has_pending_enrichment`` tells the caller whether a separate
    enrichment lookup is worth issuing for this query.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    results: list[ResultEntity] = Field(default_factory=list)
    has_pending_enrichment: bool = False


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------

class SocialLink(BaseModel):
    """A social profile URL tagged with its platform id (e.g. ``"instagram"``)."""

    model_config = ConfigDict(frozen=True)

    platform: str
    url: str


class EnrichmentData(BaseModel):
    """Slow-phase metadata for one artist query.

    ``artist_name`` is ``None`` when the metadata backend found nothing;
    merging such a record is a no-op.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    artist_name: str | None = None
    official_url: str | None = None
    discogs_url: str | None = None
    has_pre_2005_release: bool = False
    social_links: list[SocialLink] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.artist_name is not None


# ---------------------------------------------------------------------------
# Embed / resolver / release-check outputs
# ---------------------------------------------------------------------------

class EmbedResult(BaseModel):
    """Outcome of resolving one platform URL to an embeddable player."""

    model_config = ConfigDict(frozen=True)

    status: EmbedStatus
    embed_url: str | None = None
    title: str | None = None
    item_type: ReleaseType | None = None
    item_id: str | None = None


class ResolvedArtist(BaseModel):
    """An artist name recovered from a streaming-service URL."""

    model_config = ConfigDict(frozen=True)

    artist_name: str
    platform: str
    entity_type: EntityType
    url: str


class RecentRelease(BaseModel):
    """A release found by the release checker, tagged with its platform."""

    model_config = ConfigDict(frozen=True)

    platform: str
    title: str
    url: str
    release_date: datetime.date
    image_url: str | None = None
