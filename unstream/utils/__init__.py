"""Utility modules for unstream.

- **concurrency** -- gather helpers with per-branch timeouts that return
  successes and log failures instead of raising.
- **errors** -- exception hierarchy rooted at UnstreamError.
- **http** -- tolerant GET helpers returning ``None`` on failure.
- **logging** -- structlog setup with console/JSON renderers.
- **text_normalizer** -- comparison keys and rapidfuzz matching.
"""

from unstream.utils.errors import (
    ConfigurationError,
    ExtractionError,
    InvalidQueryError,
    InvalidURLError,
    SourceUnavailableError,
    UnstreamError,
)
from unstream.utils.logging import configure_logging, get_logger
from unstream.utils.text_normalizer import (
    identity_key,
    names_match,
    normalize_for_comparison,
)

__all__ = [
    "ConfigurationError",
    "ExtractionError",
    "InvalidQueryError",
    "InvalidURLError",
    "SourceUnavailableError",
    "UnstreamError",
    "configure_logging",
    "get_logger",
    "identity_key",
    "names_match",
    "normalize_for_comparison",
]
