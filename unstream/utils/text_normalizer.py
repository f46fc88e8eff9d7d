"""Text normalization helpers for matching names across platforms.

There is no shared identifier space between Bandcamp, Qobuz, Mirlo and the
rest, so entities are matched on a *comparison key*: the name lowercased
with every non-alphanumeric character removed.  ``similarity`` wraps
rapidfuzz for the looser checks adapters need when a platform's own
search returns near-misses.
"""

import re

from rapidfuzz import fuzz

_NON_ALNUM = re.compile(r"[\W_]+", re.UNICODE)


def normalize_for_comparison(value: str) -> str:
    """Return the comparison key for *value*.

    Lowercases and strips everything that is not a letter or digit, so
    ``"Mo-Rice"`` and ``"mo rice"`` both become ``"morice"``.

    Args:
        value: Raw display string.

    Returns:
        The normalized key, possibly empty.
    """
    return _NON_ALNUM.sub("", value.lower())


def names_match(query: str, candidate: str) -> bool:
    """True when the comparison keys are equal or one contains the other."""
    q = normalize_for_comparison(query)
    c = normalize_for_comparison(candidate)
    if not q or not c:
        return False
    return q == c or q in c or c in q


def similarity(query: str, candidate: str) -> float:
    """Token-order-insensitive similarity between 0.0 and 1.0."""
    return fuzz.token_sort_ratio(query.lower(), candidate.lower()) / 100.0


def identity_key(name: str, artist: str | None = None) -> str:
    """Dedup key for a result entity: ``"artist-name"`` if there is an artist, else the name."""
    return normalize_for_comparison(f"{artist}-{name}" if artist else name)


def slug_to_title(slug: str) -> str:
    """``"kid-lightbulbs"`` -> ``"Kid Lightbulbs"``."""
    return " ".join(word[:1].upper() + word[1:] for word in re.split(r"[-_]+", slug) if word)
