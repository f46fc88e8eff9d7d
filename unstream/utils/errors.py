"""Custom exception hierarchy for unstream.

All application exceptions inherit from :class:`UnstreamError`, which
carries an optional ``provider_name`` naming the platform or backend that
caused the failure (e.g. "bandcamp", "musicbrainz").

    UnstreamError  (base)
    +-- InvalidQueryError       (empty or unusable search query)
    +-- InvalidURLError         (malformed or unsupported platform URL)
    +-- ExtractionError         (release page / feed item missing a field)
    +-- SourceUnavailableError  (external backend down or erroring)
    +-- ConfigurationError      (startup / bad config)

Only the two input-validation errors ever reach a caller of the search,
embed or resolve operations.  ``ExtractionError`` is caught per item by
the adapters and ``SourceUnavailableError`` by the enrichment service.
"""


class UnstreamError(Exception):
    """Base exception for all unstream errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[bandcamp] No release date``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

class InvalidQueryError(UnstreamError):
    """Raised when a search query is empty or has no searchable characters."""

    def __init__(
        self,
        message: str = "Search query is empty",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidURLError(UnstreamError):
    """Raised when a URL is malformed or belongs to an unsupported platform."""

    def __init__(
        self,
        message: str = "URL is malformed or unsupported",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Parsing / external services
# ---------------------------------------------------------------------------

class ExtractionError(UnstreamError):
    """Raised when a release page or feed item lacks a required field."""

    def __init__(
        self,
        message: str = "Release extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SourceUnavailableError(UnstreamError):
    """Raised when an external metadata backend is unreachable or errors."""

    def __init__(
        self,
        message: str = "External source is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(UnstreamError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
