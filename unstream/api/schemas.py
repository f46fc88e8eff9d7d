"""Request/response models for the unstream HTTP API.

Search, enrichment and embed endpoints return the domain models from
:mod:`unstream.models.entities` directly; this module only adds the
envelopes that have no domain counterpart.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from unstream.models.entities import EnrichmentData, RecentRelease, SearchResponse, Source


class EnrichRequest(BaseModel):
    """A response the client already holds plus the enrichment to merge into it."""

    response: SearchResponse
    enrichment: EnrichmentData


class PlatformUrls(BaseModel):
    bandcamp: str | None = None
    faircamp: str | None = None
    mirlo: str | None = None
    qobuz: str | None = None


class ReleaseCheckRequest(BaseModel):
    """Platform URLs for one artist to check for a new release."""

    artist_name: str = Field(..., min_length=1, max_length=200)
    platforms: PlatformUrls


class ReleaseCheckResponse(BaseModel):
    artist_name: str
    release: RecentRelease | None = None


class SourcesResponse(BaseModel):
    """The platform catalog and which adapters are enabled."""

    sources: list[Source]
    enabled: list[str]


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
