"""Deduplicate, union and rank ResultEntity lists.

Entities from different adapters or different sub-queries are the same
entity when their identity keys match (``"artist-name"`` or just the name,
lowercased with non-alphanumerics removed).  Folding is order-independent
in everything but intra-list link order:

- links are unioned by source id; the first link seen for a source wins
- a missing image is backfilled from any duplicate
- ``VERIFIED`` is sticky: once any contributor carries it, the merged
  entity keeps it

Confidence from release data: when two or more *different* platforms
report a latest release whose titles normalize to the same value, the
entity is verified.  When several platforms report releases that all
disagree, it is unverified.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from unstream.models.entities import MatchConfidence, PlatformLink, ResultEntity, SearchResponse
from unstream.utils.text_normalizer import identity_key, normalize_for_comparison


def entity_key(entity: ResultEntity) -> str:
    return identity_key(entity.name, entity.artist)


def release_correlation(links: Iterable[PlatformLink]) -> MatchConfidence | None:
    """Confidence implied by the links' LatestRelease titles.

    Returns ``VERIFIED`` when some title is reported by two or more
    distinct sources, ``UNVERIFIED`` when two or more sources report
    releases but no title is shared, and ``None`` when fewer than two
    sources carry release data.
    """
    sources_by_title: dict[str, set[str]] = defaultdict(set)
    sources_with_release: set[str] = set()
    for link in links:
        if link.latest_release is None:
            continue
        title = normalize_for_comparison(link.latest_release.title)
        if not title:
            continue
        sources_by_title[title].add(link.source_id)
        sources_with_release.add(link.source_id)

    if any(len(sources) >= 2 for sources in sources_by_title.values()):
        return MatchConfidence.VERIFIED
    if len(sources_with_release) >= 2:
        return MatchConfidence.UNVERIFIED
    return None


def _union_links(existing: Sequence[PlatformLink], incoming: Iterable[PlatformLink]) -> list[PlatformLink]:
    merged = list(existing)
    present = {link.source_id for link in merged}
    for link in incoming:
        if link.source_id not in present:
            merged.append(link)
            present.add(link.source_id)
    return merged


def fold_entities(entities: Iterable[ResultEntity]) -> tuple[list[ResultEntity], dict[str, list[PlatformLink]]]:
    """Merge entities sharing an identity key.

    Returns the folded entities in first-seen order and, per key, every
    link any contributor carried (duplicates included) so callers can
    assess release correlation independently of which link was kept.
    """
    merged: dict[str, ResultEntity] = {}
    contributed: dict[str, list[PlatformLink]] = defaultdict(list)

    for entity in entities:
        key = entity_key(entity) or entity.id
        contributed[key].extend(entity.platforms)
        existing = merged.get(key)
        if existing is None:
            merged[key] = entity.model_copy(update={"platforms": _union_links([], entity.platforms)})
            continue

        update: dict[str, object] = {"platforms": _union_links(existing.platforms, entity.platforms)}
        if not existing.image_url and entity.image_url:
            update["image_url"] = entity.image_url
        if entity.match_confidence is MatchConfidence.VERIFIED:
            update["match_confidence"] = MatchConfidence.VERIFIED
        merged[key] = existing.model_copy(update=update)

    return list(merged.values()), contributed


def rank_by_platform_count(entities: Iterable[ResultEntity]) -> list[ResultEntity]:
    """Stable sort, most platform links first."""
    return sorted(entities, key=lambda entity: len(entity.platforms), reverse=True)


def merge_search_responses(responses: Sequence[SearchResponse], original_query: str) -> SearchResponse:
    """Fold per-sub-query responses into one response for *original_query*.

    With a single response the entities keep their own confidence.  With
    several, every merged entity is re-assessed: verified if any
    contributor was verified or the union of its links cross-correlates,
    otherwise unverified.
    """
    folded, contributed = fold_entities(
        entity for response in responses for entity in response.results
    )

    if len(responses) > 1:
        reassessed: list[ResultEntity] = []
        for entity in folded:
            if entity.match_confidence is not MatchConfidence.VERIFIED:
                correlated = release_correlation(contributed[entity_key(entity) or entity.id])
                confidence = (
                    MatchConfidence.VERIFIED
                    if correlated is MatchConfidence.VERIFIED
                    else MatchConfidence.UNVERIFIED
                )
                entity = entity.model_copy(update={"match_confidence": confidence})
            reassessed.append(entity)
        folded = reassessed

    results = rank_by_platform_count(folded)
    return SearchResponse(
        query=original_query,
        results=results,
        has_pending_enrichment=bool(results),
    )
