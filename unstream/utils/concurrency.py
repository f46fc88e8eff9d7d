"""Shared concurrency primitives for the two-level search fan-out.

Two patterns are exposed:

1. **gather_with_timeout** -- ``asyncio.gather`` with an optional
   per-awaitable timeout.  A branch
   that times out surfaces as an ``asyncio.TimeoutError`` in its result
   slot; it never cancels its siblings.

2. **settled_results** -- the fan-out-then-fold helper: run N branches,
   await all of them, log each failure with its label and return only the
   successful values in input order.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Sequence, TypeVar

import structlog

from unstream.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


async def gather_with_timeout(
    coros: Sequence[Awaitable[_T]],
    timeout: float | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, each with an optional timeout.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    timeout:
        Optional per-awaitable budget in seconds.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input awaitables.
    """

    async def _bounded(coro: Awaitable[_T]) -> _T:
        if timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=timeout)

    tasks = [_bounded(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


async def settled_results(
    coros: Sequence[Awaitable[_T]],
    labels: Sequence[str],
    timeout: float | None = None,
    logger: structlog.BoundLogger | None = None,
    event: str = "branch_failed",
) -> list[_T]:
    """Await every branch and keep only the successes.

    Parameters
    ----------
    coros:
        One awaitable per branch.
    labels:
        A human-readable label per branch, used in the failure log line.
    timeout:
        Per-branch budget in seconds; a branch that overruns is logged and
        dropped like any other failure.
    logger:
        Optional structured logger for failures.
    event:
        Event name for the failure log line.

    Returns
    -------
    list[_T]
        Successful branch values, in input order.
    """
    if logger is None:
        logger = _logger

    raw_results = await gather_with_timeout(coros, timeout=timeout, return_exceptions=True)

    settled: list[_T] = []
    for label, result in zip(labels, raw_results):
        if isinstance(result, asyncio.TimeoutError):
            logger.warning(event, branch=label, error="timeout", timeout=timeout)
        elif isinstance(result, BaseException):
            logger.warning(event, branch=label, error=str(result) or type(result).__name__)
        else:
            settled.append(result)
    return settled
