"""Cache providers.

MemoryCacheProvider keeps platform directories (Faircamp webring,
Jam.coop artist list, Mirlo release feed) for a few minutes so a burst of
searches does not refetch them.  It is per-process; a shared backend can
replace it behind ICacheProvider without touching the adapters.
"""

from unstream.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
