"""One query against every configured adapter ("fetch-all-adapters").

Adapters run concurrently, each under its own timeout.  Their candidates
are folded by identity key, search-only platforms are attached to the
artists a verifying platform found, confidence is assessed from release
titles and the list is ranked by platform count.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.interfaces.source_adapter import ISourceAdapter
from unstream.models.entities import EntityType, PlatformLink, ResultEntity, SearchResponse
from unstream.services.enrichment_merger import order_platforms
from unstream.services.query_expander import validate_query
from unstream.services.result_merger import fold_entities, rank_by_platform_count, release_correlation
from unstream.utils.concurrency import settled_results
from unstream.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


class SourceSearchService:
    """Fans one query out to every adapter and folds the answers.

    Parameters
    ----------
    adapters:
        Every enabled adapter, verifying and search-only alike.  Which is
        which is read from the registry's ``search_only`` flag.
    registry:
        The platform catalog.
    adapter_timeout:
        Budget in seconds for each adapter's whole ``fetch_candidates``.
    """

    def __init__(
        self,
        adapters: Sequence[ISourceAdapter],
        registry: SourceRegistry = SOURCE_REGISTRY,
        adapter_timeout: float | None = 15.0,
    ) -> None:
        self._adapters = list(adapters)
        self._registry = registry
        self._adapter_timeout = adapter_timeout

    @property
    def adapters(self) -> list[ISourceAdapter]:
        return list(self._adapters)

    def _is_search_only(self, source_id: str) -> bool:
        source = self._registry.get(source_id)
        return source is not None and source.search_only

    def _known_links(self, entity: ResultEntity) -> ResultEntity | None:
        links = [link for link in entity.platforms if link.source_id in self._registry]
        if len(links) != len(entity.platforms):
            _logger.warning(
                "unknown_source_dropped",
                entity=entity.name,
                sources=[p.source_id for p in entity.platforms if p.source_id not in self._registry],
            )
        if not links:
            return None
        return entity.model_copy(update={"platforms": links})

    def _decorate(self, entity: ResultEntity) -> ResultEntity:
        """Attach a search link for every enabled search-only platform."""
        if entity.type != EntityType.ARTIST:
            return entity
        present = set(entity.source_ids)
        extra = []
        for adapter in self._adapters:
            source_id = adapter.source_id
            if source_id in present or not self._is_search_only(source_id):
                continue
            url = self._registry.search_url(source_id, entity.name)
            if url:
                extra.append(PlatformLink(source_id=source_id, url=url))
                present.add(source_id)
        if not extra:
            return entity
        return entity.model_copy(update={"platforms": [*entity.platforms, *extra]})

    async def search(self, query: str) -> SearchResponse:
        """Search every adapter for *query*.

        Raises:
            InvalidQueryError: If *query* is empty or has nothing searchable.
        """
        query = validate_query(query)
        batches = await settled_results(
            [adapter.fetch_candidates(query) for adapter in self._adapters],
            labels=[adapter.source_id for adapter in self._adapters],
            timeout=self._adapter_timeout,
            logger=_logger,
            event="adapter_branch_failed",
        )

        candidates = []
        for batch in batches:
            for entity in batch:
                known = self._known_links(entity)
                if known is not None:
                    candidates.append(known)

        folded, _ = fold_entities(candidates)

        results: list[ResultEntity] = []
        for entity in folded:
            if all(self._is_search_only(link.source_id) for link in entity.platforms):
                continue
            entity = self._decorate(entity)
            update: dict[str, object] = {
                "platforms": order_platforms(entity.platforms, self._registry)
            }
            if entity.match_confidence is None:
                update["match_confidence"] = release_correlation(entity.platforms)
            results.append(entity.model_copy(update=update))

        results = rank_by_platform_count(results)
        _logger.info("source_search_complete", query=query, adapters=len(self._adapters), results=len(results))
        return SearchResponse(query=query, results=results, has_pending_enrichment=bool(results))
