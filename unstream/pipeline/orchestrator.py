"""Fan-out orchestrator for artist searches.

A raw query is expanded into sub-queries (``"A feat. B"`` becomes the full
string plus ``"A"`` and ``"B"``).  A single sub-query goes straight to the
:class:`SourceSearchService`.  Several sub-queries are searched
concurrently, each of which fans out to every adapter in turn, and the
per-sub-query responses are merged once every branch has settled.

ARCHITECTURE NOTE:
    Failure isolation is structural.  Each branch owns its own result
    list; a branch that raises or times out is logged and contributes
    nothing, and no branch ever cancels another.  The merger only sees
    completed, immutable SearchResponse objects.
"""

from __future__ import annotations

import structlog

from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.models.entities import SearchResponse
from unstream.services.enrichment_merger import order_platforms
from unstream.services.query_expander import expand_query
from unstream.services.result_merger import merge_search_responses
from unstream.services.source_search_service import SourceSearchService
from unstream.utils.concurrency import settled_results
from unstream.utils.logging import get_logger


class SearchOrchestrator:
    """Runs one logical search across sub-queries and adapters.

    Parameters
    ----------
    search_service:
        Per-query fetch-all-adapters service.
    registry:
        Platform catalog, used to re-order merged platform lists.
    subquery_timeout:
        Optional overall budget per sub-query branch, in seconds.  Each
        adapter inside a branch is already bounded on its own.
    """

    def __init__(
        self,
        search_service: SourceSearchService,
        registry: SourceRegistry = SOURCE_REGISTRY,
        subquery_timeout: float | None = None,
    ) -> None:
        self._search_service = search_service
        self._registry = registry
        self._subquery_timeout = subquery_timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def search(self, query: str) -> SearchResponse:
        """Search every adapter for *query* and its collaborator segments.

        Raises:
            InvalidQueryError: If *query* is empty or unsearchable.
        """
        sub_queries = expand_query(query)
        if len(sub_queries) == 1:
            return await self._search_service.search(sub_queries[0])

        self._logger.info("query_expanded", query=query, sub_queries=sub_queries)
        responses = await settled_results(
            [self._search_service.search(sub_query) for sub_query in sub_queries],
            labels=sub_queries,
            timeout=self._subquery_timeout,
            logger=self._logger,
            event="subquery_failed",
        )

        merged = merge_search_responses(responses, query.strip())
        results = [
            entity.model_copy(update={"platforms": order_platforms(entity.platforms, self._registry)})
            for entity in merged.results
        ]
        self._logger.info(
            "search_complete",
            query=query,
            sub_queries=len(sub_queries),
            settled=len(responses),
            results=len(results),
        )
        return merged.model_copy(update={"results": results})
