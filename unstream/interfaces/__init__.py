"""Abstract interfaces for unstream's pluggable components.

- **ISourceAdapter** -- one platform's artist/release lookup
- **IEnrichmentProvider** -- slow-phase artist metadata lookup
- **ICacheProvider** -- key-value cache for platform directories
"""

from unstream.interfaces.cache_provider import ICacheProvider
from unstream.interfaces.enrichment_provider import IEnrichmentProvider
from unstream.interfaces.source_adapter import ISourceAdapter

__all__ = ["ICacheProvider", "IEnrichmentProvider", "ISourceAdapter"]
