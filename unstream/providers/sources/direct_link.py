"""Direct-link adapter for platforms the engine cannot query.

Ampwall, Nina, Sonica, Ko-fi and Buy Me a Coffee expose nothing that can
confirm an artist exists, so the adapter only builds the platform's search
URL from the registry template.  The resulting links are search-only: the
search service attaches them to artists a verifying platform found and
never lets them create a result on their own.
"""

from __future__ import annotations

from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry
from unstream.interfaces.source_adapter import ISourceAdapter
from unstream.models.entities import PlatformLink, ResultEntity
from unstream.utils.text_normalizer import identity_key


class DirectLinkAdapter(ISourceAdapter):
    """Builds a search-URL link for one search-only platform; makes no requests."""

    def __init__(self, source_id: str, registry: SourceRegistry = SOURCE_REGISTRY) -> None:
        if source_id not in registry or not registry[source_id].search_url_template:
            raise ValueError(f"No search URL template for source {source_id!r}")
        self._source_id = source_id
        self._registry = registry

    @property
    def source_id(self) -> str:
        return self._source_id

    def link_for(self, name: str) -> PlatformLink:
        return PlatformLink(source_id=self._source_id, url=self._registry.search_url(self._source_id, name))

    async def fetch_candidates(self, query: str) -> list[ResultEntity]:
        key = identity_key(query)
        if not key:
            return []
        return [ResultEntity(id=key, name=query, platforms=[self.link_for(query)])]
