"""Domain models for unstream."""

from unstream.models.entities import (
    EmbedResult,
    EmbedStatus,
    EnrichmentData,
    EntityType,
    LatestRelease,
    MatchConfidence,
    PlatformLink,
    RecentRelease,
    ReleaseType,
    ResolvedArtist,
    ResultEntity,
    SearchResponse,
    SocialLink,
    Source,
    SourceCategory,
)

__all__ = [
    "EmbedResult",
    "EmbedStatus",
    "EnrichmentData",
    "EntityType",
    "LatestRelease",
    "MatchConfidence",
    "PlatformLink",
    "RecentRelease",
    "ReleaseType",
    "ResolvedArtist",
    "ResultEntity",
    "SearchResponse",
    "SocialLink",
    "Source",
    "SourceCategory",
]
