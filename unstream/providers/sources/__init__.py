"""Platform source adapters.

Three families behind the one ISourceAdapter contract:

    - Direct-link: DirectLinkAdapter (search-only platforms), MirloAdapter
      (predictable artist path checked via og:title)
    - Artist-page scraping: BandcampAdapter, QobuzAdapter
    - Feed-based: FaircampAdapter, MirloAdapter's release lookup

BandwagonAdapter, JamcoopAdapter and PatreonAdapter match names only and
carry no release data.
"""

from unstream.providers.sources.bandcamp import BandcampAdapter
from unstream.providers.sources.bandwagon import BandwagonAdapter
from unstream.providers.sources.direct_link import DirectLinkAdapter
from unstream.providers.sources.faircamp import FaircampAdapter
from unstream.providers.sources.jamcoop import JamcoopAdapter
from unstream.providers.sources.mirlo import MirloAdapter
from unstream.providers.sources.patreon import PatreonAdapter
from unstream.providers.sources.qobuz import QobuzAdapter

__all__ = [
    "BandcampAdapter",
    "BandwagonAdapter",
    "DirectLinkAdapter",
    "FaircampAdapter",
    "JamcoopAdapter",
    "MirloAdapter",
    "PatreonAdapter",
    "QobuzAdapter",
]
