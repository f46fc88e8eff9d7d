"""unstream FastAPI application entry point.

Wires together the source adapters, services and routes via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``
and configures structured logging.

Also exposes :func:`build_services` so the CLI can run the same search
stack outside the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from unstream.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from unstream.api.routes import router as api_router
from unstream.config.loader import load_config
from unstream.config.settings import Settings
from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.interfaces.source_adapter import ISourceAdapter
from unstream.pipeline.orchestrator import SearchOrchestrator
from unstream.providers.cache.memory_cache import MemoryCacheProvider
from unstream.providers.enrichment.musicbrainz_provider import MusicBrainzEnrichmentProvider
from unstream.providers.sources import (
    BandcampAdapter,
    BandwagonAdapter,
    DirectLinkAdapter,
    FaircampAdapter,
    JamcoopAdapter,
    MirloAdapter,
    PatreonAdapter,
    QobuzAdapter,
)
from unstream.services.embed_resolver import EmbedResolver
from unstream.services.enrichment_service import EnrichmentService
from unstream.services.release_checker import ReleaseChecker
from unstream.services.source_search_service import SourceSearchService
from unstream.services.url_resolver import UrlResolver
from unstream.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"
# Mirlo's global feed changes slowly and is shared by every artist lookup.
_FEED_CACHE_TTL = 300

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings.config_path, settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component construction
# ---------------------------------------------------------------------------


def build_services(
    app_settings: Settings,
    app_config: dict[str, Any],
    http_client: httpx.AsyncClient,
    registry: SourceRegistry = SOURCE_REGISTRY,
) -> dict[str, Any]:
    """Construct adapters and services around one shared HTTP client.

    Returns a flat dict of named components; the web app stores them on
    ``app.state`` and the CLI uses them directly.
    """
    threshold = float(app_config.get("search", {}).get("name_match_threshold", 0.85))
    directory_cache = MemoryCacheProvider(max_size=32, ttl=app_settings.directory_cache_ttl)
    feed_cache = MemoryCacheProvider(max_size=8, ttl=_FEED_CACHE_TTL)

    common = {"settings": app_settings, "registry": registry, "name_threshold": threshold}
    bandcamp = BandcampAdapter(http_client, **common)
    qobuz = QobuzAdapter(http_client, **common)
    mirlo = MirloAdapter(http_client, cache=feed_cache, **common)
    faircamp = FaircampAdapter(http_client, cache=directory_cache, **common)
    verifying: dict[str, ISourceAdapter] = {
        "bandcamp": bandcamp,
        "qobuz": qobuz,
        "mirlo": mirlo,
        "faircamp": faircamp,
        "bandwagon": BandwagonAdapter(http_client, **common),
        "jamcoop": JamcoopAdapter(http_client, cache=directory_cache, **common),
        "patreon": PatreonAdapter(http_client, **common),
    }

    adapters: list[ISourceAdapter] = []
    for source_id in app_config["sources"]["enabled"]:
        if source_id in verifying:
            adapters.append(verifying[source_id])
        elif registry[source_id].search_only:
            adapters.append(DirectLinkAdapter(source_id, registry))
        else:
            _logger.warning("source_has_no_adapter", source=source_id)

    search_service = SourceSearchService(adapters, registry, adapter_timeout=app_settings.adapter_timeout)
    enrichment_provider = MusicBrainzEnrichmentProvider(settings=app_settings, http_client=http_client)
    recent_days = int(app_config.get("release_check", {}).get("recent_days", 8))

    return {
        "adapters": adapters,
        "search_service": search_service,
        "orchestrator": SearchOrchestrator(search_service, registry),
        "enrichment_service": EnrichmentService(enrichment_provider, registry),
        "embed_resolver": EmbedResolver(http_client, app_settings),
        "url_resolver": UrlResolver(http_client, app_settings),
        "release_checker": ReleaseChecker(
            bandcamp, faircamp, mirlo, qobuz, recent_days=recent_days, timeout=app_settings.adapter_timeout
        ),
    }


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = httpx.AsyncClient(timeout=30.0, headers={"User-Agent": app_settings.http_user_agent})
    services = build_services(app_settings, config, http_client)
    adapters: list[ISourceAdapter] = services.pop("adapters")

    enabled = [adapter.source_id for adapter in adapters]
    provider_registry = {
        "adapters": [s for s in enabled if not SOURCE_REGISTRY[s].search_only],
        "search_only": [s for s in enabled if SOURCE_REGISTRY[s].search_only],
        "enrichment": "musicbrainz",
    }

    return {
        "http_client": http_client,
        "registry": SOURCE_REGISTRY,
        "enabled_sources": enabled,
        "provider_registry": provider_registry,
        **services,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        sources=components["enabled_sources"],
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="unstream API",
        version=_VERSION,
        description=(
            "Find where else an artist's music is available: search independent "
            "marketplaces, patronage and decentralized platforms at once, then "
            "enrich results with official, catalog and social links."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=config.get("cors", {}).get("allowed_origins"))

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "unstream.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
