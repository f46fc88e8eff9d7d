"""Slow-phase enrichment providers."""

from unstream.providers.enrichment.musicbrainz_provider import MusicBrainzEnrichmentProvider

__all__ = ["MusicBrainzEnrichmentProvider"]
