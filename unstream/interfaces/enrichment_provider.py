"""Abstract base class for the slow-phase metadata lookup.

The enrichment provider resolves one artist name to official-site,
catalog-database and social links plus the pre-2005 library flag.  It is
queried separately from (and usually after) the primary search.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from unstream.models.entities import EnrichmentData


class IEnrichmentProvider(ABC):
    """Contract for artist metadata backends (e.g. MusicBrainz)."""

    @abstractmethod
    async def lookup(self, artist_name: str) -> EnrichmentData:
        """Resolve metadata for *artist_name*.

        Returns
        -------
        EnrichmentData
            With ``artist_name`` set to ``None`` when nothing matched.

        Raises
        ------
        unstream.utils.errors.SourceUnavailableError
            If the backend cannot be reached or returns an error.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"musicbrainz"``."""
