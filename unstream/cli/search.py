"""Standalone CLI for running one unstream search.

Usage::

    python -m unstream.cli.search "Kid Lightbulbs"
    python -m unstream.cli.search "Mo-Rice and Babebee" --json
    python -m unstream.cli.search "Static Age" --enrich

Runs the same orchestrator as the web API and prints each result with
its platform links, or the SearchResponse as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from unstream.models.entities import SearchResponse
from unstream.utils.errors import InvalidQueryError


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_text_output(response: SearchResponse) -> str:
    """Human-readable listing, one block per result."""
    if not response.results:
        return f'No results found for "{response.query}".'

    lines = [f'Results for "{response.query}":', ""]
    for entity in response.results:
        heading = entity.name if entity.artist is None else f"{entity.name} by {entity.artist}"
        badge = f" [{entity.match_confidence.value}]" if entity.match_confidence else ""
        lines.append(f"{heading} ({entity.type.value}){badge}")
        for link in entity.platforms:
            lines.append(f"  - {link.source_id}: {link.url}")
            release = link.latest_release
            if release is not None:
                dated = f" ({release.release_date.isoformat()})" if release.release_date else ""
                lines.append(f"      latest: {release.title}{dated}")
        lines.append("")
    if response.has_pending_enrichment:
        lines.append("Enrichment pending; rerun with --enrich for official and social links.")
    return "\n".join(lines).rstrip()


def format_json_output(response: SearchResponse) -> str:
    return response.model_dump_json(indent=2)


def _suppress_logs() -> None:
    """Send structlog and stdlib logging to stderr at WARNING+ level.

    Must run before ``unstream.main`` is imported so cached loggers pick
    up the quiet configuration.
    """
    import logging
    import os

    import structlog

    os.environ["LOG_LEVEL"] = "WARNING"

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.WARNING)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _run(query: str, json_output: bool, enrich: bool) -> int:
    """Build the search stack, run the query, print, close the client.

    Returns 0 on success, 2 on an invalid query.
    """
    # Deferred import: unstream.main reads settings and config on import.
    import httpx

    from unstream.main import build_services, config, settings

    headers = {"User-Agent": settings.http_user_agent}
    async with httpx.AsyncClient(timeout=30.0, headers=headers) as http_client:
        services = build_services(settings, config, http_client)
        try:
            response = await services["orchestrator"].search(query)
            if enrich and response.results:
                enrichment = await services["enrichment_service"].lookup(query)
                response = services["enrichment_service"].enrich(response, enrichment)
        except InvalidQueryError as exc:
            print(f"Error: {exc.message}", file=sys.stderr)
            return 2

    print(format_json_output(response) if json_output else format_text_output(response))
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m unstream.cli.search",
        description="Search independent music platforms for an artist.",
    )
    parser.add_argument("query", type=str, help='Artist name, e.g. "Kid Lightbulbs" or "A feat. B".')
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the SearchResponse as JSON.",
    )
    parser.add_argument(
        "--enrich",
        action="store_true",
        help="Also run the MusicBrainz enrichment phase and merge its links.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output (implied by --json).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits with the status from :func:`_run`."""
    args = _build_parser().parse_args(argv)
    if args.quiet or args.json_output:
        _suppress_logs()
    sys.exit(asyncio.run(_run(args.query, args.json_output, args.enrich)))


if __name__ == "__main__":
    main()
