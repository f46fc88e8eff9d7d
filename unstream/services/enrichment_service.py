"""The slow second phase: look an artist up and merge what comes back.

Lookup and merge are separate calls.  A consumer shows the primary
results first, asks for enrichment, then applies it to the response it
holds and replaces its copy with the returned one.
"""

from __future__ import annotations

import structlog

from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.interfaces.enrichment_provider import IEnrichmentProvider
from unstream.models.entities import EnrichmentData, SearchResponse
from unstream.services.enrichment_merger import apply_enrichment
from unstream.services.query_expander import validate_query
from unstream.utils.errors import SourceUnavailableError
from unstream.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


class EnrichmentService:
    """Wraps an IEnrichmentProvider so backend outages read as "not found"."""

    def __init__(
        self, provider: IEnrichmentProvider, registry: SourceRegistry = SOURCE_REGISTRY
    ) -> None:
        self._provider = provider
        self._registry = registry

    async def lookup(self, artist_name: str) -> EnrichmentData:
        """Fetch enrichment for *artist_name*.

        Raises:
            InvalidQueryError: If *artist_name* is empty or unsearchable.
        """
        artist_name = validate_query(artist_name)
        try:
            return await self._provider.lookup(artist_name)
        except SourceUnavailableError as exc:
            _logger.warning(
                "enrichment_unavailable",
                provider=self._provider.get_provider_name(),
                query=artist_name,
                error=str(exc),
            )
            return EnrichmentData(query=artist_name)

    def enrich(self, response: SearchResponse, enrichment: EnrichmentData) -> SearchResponse:
        return apply_enrichment(response, enrichment, self._registry)
