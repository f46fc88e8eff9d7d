"""Patreon adapter: the public JSON search endpoint.

Campaign names often differ from the artist name ("Mo-bility Station" for
Mo-Rice), so a campaign also matches when its URL slug (``/Mo_Rice``)
normalizes to the query.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from unstream.models.entities import ResultEntity
from unstream.providers.sources.base import BaseSourceAdapter
from unstream.utils.http import fetch_json
from unstream.utils.text_normalizer import normalize_for_comparison

SEARCH_API_URL = "https://www.patreon.com/api/search?q={query}"
_MAX_RESULTS = 20


def parse_campaigns(payload: Any, query: str) -> list[tuple[str, str]]:
    """(display name, campaign URL) pairs matching *query* by name or slug."""
    if not isinstance(payload, dict):
        return []
    key = normalize_for_comparison(query)
    found: list[tuple[str, str]] = []
    seen: set[str] = set()
    for campaign in payload.get("data") or []:
        if not isinstance(campaign, dict) or campaign.get("type") != "campaign-document":
            continue
        attributes = campaign.get("attributes") or {}
        creator = attributes.get("creator_name")
        url = attributes.get("url")
        if not creator or not url or url in seen:
            continue
        slug = url.rstrip("/").rsplit("/", 1)[-1]
        if normalize_for_comparison(creator) == key:
            name = creator
        elif normalize_for_comparison(slug) == key:
            name = query
        else:
            continue
        seen.add(url)
        found.append((name, url))
        if len(found) >= _MAX_RESULTS:
            break
    return found


class PatreonAdapter(BaseSourceAdapter):
    """Name-only adapter for patreon.com creators."""

    @property
    def source_id(self) -> str:
        return "patreon"

    async def _search(self, query: str) -> list[ResultEntity]:
        payload = await fetch_json(
            self._http,
            SEARCH_API_URL.format(query=quote(query, safe="")),
            timeout=self._settings.search_timeout,
            source=self.source_id,
            user_agent=self._settings.http_user_agent,
        )
        return [self._entity(name=name, url=url) for name, url in parse_campaigns(payload, query)]
