"""Thin GET helpers shared by every adapter and resolver.

Third-party pages are treated as opaque text.  A transport failure,
timeout or non-2xx status is logged and returned as ``None`` so callers
can degrade to "nothing found" without a try/except of their own.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from unstream.utils.logging import get_logger

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_logger: structlog.BoundLogger = get_logger(__name__)


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float = 8.0,
    source: str | None = None,
    headers: dict[str, str] | None = None,
    user_agent: str = USER_AGENT,
) -> str | None:
    """GET *url* and return the body text, or ``None`` on any failure."""
    request_headers = {"User-Agent": user_agent, "Accept": "text/html,application/xhtml+xml,*/*"}
    if headers:
        request_headers.update(headers)
    try:
        response = await client.get(
            url, headers=request_headers, timeout=timeout, follow_redirects=True
        )
    except httpx.HTTPError as exc:
        _logger.warning("fetch_failed", source=source, url=url, error=str(exc) or type(exc).__name__)
        return None

    if response.status_code < 200 or response.status_code >= 300:
        _logger.warning("fetch_http_error", source=source, url=url, status=response.status_code)
        return None
    return response.text


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float = 8.0,
    source: str | None = None,
    headers: dict[str, str] | None = None,
    user_agent: str = USER_AGENT,
) -> Any | None:
    """GET *url* and decode the body as JSON, or ``None`` on any failure."""
    merged = {"Accept": "application/json"}
    if headers:
        merged.update(headers)
    text = await fetch_text(
        client, url, timeout=timeout, source=source, headers=merged, user_agent=user_agent
    )
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError as exc:
        _logger.warning("fetch_bad_json", source=source, url=url, error=str(exc))
        return None
