"""Abstract base class for platform source adapters.

Every platform (or family of platforms) the search fans out to is wrapped
in an adapter exposing a single operation, :meth:`fetch_candidates`.  The
fan-out code never branches on adapter shape; direct-link, page-scraping
and feed-based adapters are interchangeable behind this contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from unstream.models.entities import ResultEntity


class ISourceAdapter(ABC):
    """Contract for one platform's artist/release lookup."""

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Registry id of the platform this adapter queries (e.g. ``"bandcamp"``)."""

    @abstractmethod
    async def fetch_candidates(self, query: str) -> list[ResultEntity]:
        """Return the entities this platform lists for *query*.

        Parameters
        ----------
        query:
            A single artist name (one sub-query of the user's search).

        Returns
        -------
        list[ResultEntity]
            Zero or more candidates, each carrying exactly one
            :class:`PlatformLink` for :attr:`source_id`.  Transport and
            parse failures yield an empty list; implementations must not
            raise.
        """
