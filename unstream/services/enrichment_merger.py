"""Merge a slow-phase EnrichmentData record into delivered results.

The merge never touches the caller's objects: it returns a new list (or a
new SearchResponse) so a consumer can replace the copy it already shows.
Only artist entities whose normalized name equals, contains or is
contained by the resolved artist name are decorated.

Platform precedence after any insertion:

1. ordinary platforms, in their existing relative order
2. search-only marketplace and patronage platforms
3. official site, catalog database, then the library services
4. social platforms, in ``SOCIAL_ORDER``
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from unstream.config.source_registry import (
    LIBRARY_SOURCE_IDS,
    OFFICIAL_ORDER,
    SOCIAL_ORDER,
    SOURCE_REGISTRY,
    SourceRegistry,
)
from unstream.models.entities import (
    EnrichmentData,
    EntityType,
    PlatformLink,
    ResultEntity,
    SearchResponse,
    SourceCategory,
)
from unstream.utils.text_normalizer import names_match

SEARCH_URL_MARKERS: tuple[str, ...] = (
    "duckduckgo.com/",
    "google.com/search",
    "/search",
    "?q=",
    "&q=",
    "query=",
    "search_query=",
    "/explore",
    "/results?",
)

_SEARCH_ONLY_TIER = (SourceCategory.MARKETPLACE, SourceCategory.PATRONAGE)


def is_search_url(url: str) -> bool:
    """True when *url* is a platform search page rather than a direct profile."""
    lowered = url.lower()
    return any(marker in lowered for marker in SEARCH_URL_MARKERS)


def _precedence(link: PlatformLink, registry: SourceRegistry) -> tuple[int, int]:
    source = registry.get(link.source_id)
    if source is None:
        return (0, 0)
    if source.category == SourceCategory.SOCIAL:
        index = SOCIAL_ORDER.index(source.id) if source.id in SOCIAL_ORDER else len(SOCIAL_ORDER)
        return (3, index)
    if source.id in OFFICIAL_ORDER:
        return (2, OFFICIAL_ORDER.index(source.id))
    if source.search_only and source.category in _SEARCH_ONLY_TIER:
        return (1, 0)
    return (0, 0)


def order_platforms(
    platforms: Iterable[PlatformLink], registry: SourceRegistry = SOURCE_REGISTRY
) -> list[PlatformLink]:
    """Stable re-sort of *platforms* into display precedence."""
    return sorted(platforms, key=lambda link: _precedence(link, registry))


def _enrich_entity(
    entity: ResultEntity, enrichment: EnrichmentData, registry: SourceRegistry
) -> ResultEntity:
    platforms = list(entity.platforms)
    present = {link.source_id for link in platforms}

    def append(source_id: str, url: str | None) -> None:
        if url and source_id not in present and source_id in registry:
            platforms.append(PlatformLink(source_id=source_id, url=url))
            present.add(source_id)

    append("officialsite", enrichment.official_url)
    append("discogs", enrichment.discogs_url)
    if enrichment.has_pre_2005_release:
        for library_id in LIBRARY_SOURCE_IDS:
            append(library_id, registry.search_url(library_id, entity.name))

    for social in enrichment.social_links:
        if social.platform not in present:
            append(social.platform, social.url)
            continue
        index = next(i for i, link in enumerate(platforms) if link.source_id == social.platform)
        # A direct profile already in place is never downgraded.
        if is_search_url(platforms[index].url):
            platforms[index] = PlatformLink(source_id=social.platform, url=social.url)

    return entity.model_copy(update={"platforms": order_platforms(platforms, registry)})


def merge_enrichment(
    results: Sequence[ResultEntity],
    enrichment: EnrichmentData,
    registry: SourceRegistry = SOURCE_REGISTRY,
) -> list[ResultEntity]:
    """Return a new result list with *enrichment* applied to matching artists.

    Parameters
    ----------
    results:
        The result list the consumer already holds.  Not modified.
    enrichment:
        The lookup for the query's artist.  When it resolved nothing the
        input comes back unchanged (as a new list).
    registry:
        Used for library search URLs and platform precedence.
    """
    if not enrichment.found:
        return list(results)

    artist_name = enrichment.artist_name or ""
    merged: list[ResultEntity] = []
    for entity in results:
        if entity.type == EntityType.ARTIST and names_match(entity.name, artist_name):
            merged.append(_enrich_entity(entity, enrichment, registry))
        else:
            merged.append(entity)
    return merged


def apply_enrichment(
    response: SearchResponse,
    enrichment: EnrichmentData,
    registry: SourceRegistry = SOURCE_REGISTRY,
) -> SearchResponse:
    """Replacement SearchResponse with enrichment merged and nothing pending."""
    return SearchResponse(
        query=response.query,
        results=merge_enrichment(response.results, enrichment, registry),
        has_pending_enrichment=False,
    )
