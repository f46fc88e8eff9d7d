"""FastAPI routes for the unstream search engine.

Endpoint                      Method  Description
----------------------------------------------------------------------
/api/v1/search/sources        GET     Fast phase: search every platform
/api/v1/search/enrichment     GET     Slow phase: artist metadata lookup
/api/v1/search/enrich         POST    Merge enrichment into a held response
/api/v1/embed                 GET     Bandcamp embed widget for one URL
/api/v1/resolve/url           GET     Artist name from a streaming link
/api/v1/releases/check        POST    Release from the last 8 days, if any
/api/v1/sources               GET     Platform catalog
/api/v1/health                GET     Health check

Service dependencies are resolved from ``app.state`` (populated at
startup by ``unstream.main._build_all``) through ``Depends`` helpers,
so tests can swap any of them for a mock.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from unstream.api.schemas import (
    EnrichRequest,
    ErrorResponse,
    HealthResponse,
    ReleaseCheckRequest,
    ReleaseCheckResponse,
    SourcesResponse,
)
from unstream.config.source_registry import SourceRegistry
from unstream.models.entities import EmbedResult, EmbedStatus, EnrichmentData, ResolvedArtist, SearchResponse
from unstream.pipeline.orchestrator import SearchOrchestrator
from unstream.services.embed_resolver import EmbedResolver
from unstream.services.enrichment_service import EnrichmentService
from unstream.services.release_checker import ReleaseChecker
from unstream.services.url_resolver import UrlResolver
from unstream.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.orchestrator


def _get_enrichment_service(request: Request) -> EnrichmentService:
    return request.app.state.enrichment_service


def _get_embed_resolver(request: Request) -> EmbedResolver:
    return request.app.state.embed_resolver


def _get_url_resolver(request: Request) -> UrlResolver:
    return request.app.state.url_resolver


def _get_release_checker(request: Request) -> ReleaseChecker:
    return request.app.state.release_checker


def _get_registry(request: Request) -> SourceRegistry:
    return request.app.state.registry


OrchestratorDep = Annotated[SearchOrchestrator, Depends(_get_orchestrator)]
EnrichmentDep = Annotated[EnrichmentService, Depends(_get_enrichment_service)]
EmbedDep = Annotated[EmbedResolver, Depends(_get_embed_resolver)]
UrlResolverDep = Annotated[UrlResolver, Depends(_get_url_resolver)]
ReleaseCheckerDep = Annotated[ReleaseChecker, Depends(_get_release_checker)]
RegistryDep = Annotated[SourceRegistry, Depends(_get_registry)]


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@router.get(
    "/search/sources",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Search every platform for an artist",
)
async def search_sources(
    orchestrator: OrchestratorDep,
    query: Annotated[str, Query(max_length=200)] = "",
) -> SearchResponse:
    """Fast phase.  ``has_pending_enrichment`` tells the client to call
    ``/search/enrichment`` next."""
    return await orchestrator.search(query)


@router.get(
    "/search/enrichment",
    response_model=EnrichmentData,
    responses={400: {"model": ErrorResponse}},
    summary="Look up official, catalog and social links for an artist",
)
async def search_enrichment(
    enrichment_service: EnrichmentDep,
    query: Annotated[str, Query(max_length=200)] = "",
) -> EnrichmentData:
    return await enrichment_service.lookup(query)


@router.post(
    "/search/enrich",
    response_model=SearchResponse,
    summary="Merge enrichment into a search response",
)
async def enrich_response(body: EnrichRequest, enrichment_service: EnrichmentDep) -> SearchResponse:
    """Returns a replacement response; the client discards its old copy."""
    return enrichment_service.enrich(body.response, body.enrichment)


# ---------------------------------------------------------------------------
# Embeds, URL resolution, release checks
# ---------------------------------------------------------------------------


@router.get(
    "/embed",
    response_model=EmbedResult,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Resolve a Bandcamp URL to an embeddable player",
)
async def embed(resolver: EmbedDep, url: str = "") -> EmbedResult:
    result = await resolver.resolve(url)
    if result.status is EmbedStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Could not find embeddable content")
    return result


@router.get(
    "/resolve/url",
    response_model=ResolvedArtist,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Resolve a Spotify or Apple Music link to an artist name",
)
async def resolve_url(resolver: UrlResolverDep, url: str = "") -> ResolvedArtist:
    resolved = await resolver.resolve(url)
    if resolved is None:
        raise HTTPException(status_code=404, detail="Could not resolve artist from URL")
    return resolved


@router.post(
    "/releases/check",
    response_model=ReleaseCheckResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Check an artist's platforms for a release from the last 8 days",
)
async def check_releases(body: ReleaseCheckRequest, checker: ReleaseCheckerDep) -> ReleaseCheckResponse:
    release = await checker.check(body.platforms.model_dump())
    return ReleaseCheckResponse(artist_name=body.artist_name, release=release)


# ---------------------------------------------------------------------------
# Catalog and health
# ---------------------------------------------------------------------------


@router.get("/sources", response_model=SourcesResponse, summary="List known platforms")
async def list_sources(request: Request, registry: RegistryDep) -> SourcesResponse:
    enabled: list[str] = getattr(request.app.state, "enabled_sources", [])
    return SourcesResponse(sources=list(registry.values()), enabled=list(enabled))


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(request: Request) -> HealthResponse:
    """Healthy when at least one verifying adapter is configured."""
    providers: dict[str, Any] = dict(getattr(request.app.state, "provider_registry", {}))
    status = "healthy" if providers.get("adapters") else "unhealthy"
    return HealthResponse(status=status, version=_VERSION, providers=providers)
