"""Split collaboration queries ("A feat. B") into per-artist sub-queries.

The expanded list always starts with the untouched original so a band
literally called "A and B" is still searched as a whole.  A standalone
``x`` only splits when surrounded by whitespace, so "The xx" stays intact.
"""

from __future__ import annotations

import re

from unstream.utils.errors import InvalidQueryError
from unstream.utils.text_normalizer import normalize_for_comparison

_SEPARATOR = re.compile(
    r"\s+(?:and|&|feat\.?|featuring|\+|x)\s+|\s*,\s*",
    re.IGNORECASE,
)


def validate_query(query: str | None) -> str:
    """Return *query* stripped of surrounding whitespace.

    Raises:
        InvalidQueryError: If the query is empty or has no letters or digits.
    """
    if query is None or not query.strip():
        raise InvalidQueryError("Search query is empty")
    if not normalize_for_comparison(query):
        raise InvalidQueryError(f"Search query {query!r} has no searchable characters")
    return query.strip()


def split_collaborators(query: str) -> list[str]:
    """Trimmed, non-empty segments of *query* between collaboration separators."""
    return [part.strip() for part in _SEPARATOR.split(query) if part and part.strip()]


def expand_query(query: str) -> list[str]:
    """Expand *query* into the sub-queries to search.

    Returns ``[query]`` when fewer than two segments are found; otherwise
    the original followed by each segment, deduplicated on the comparison
    key while keeping first-seen spelling and order.

    Raises:
        InvalidQueryError: If the query is empty or unsearchable.
    """
    validate_query(query)
    segments = split_collaborators(query)
    if len(segments) < 2:
        return [query]

    expanded: list[str] = []
    seen: set[str] = set()
    for candidate in [query, *segments]:
        key = normalize_for_comparison(candidate)
        if not key or key in seen:
            continue
        seen.add(key)
        expanded.append(candidate)
    return expanded
