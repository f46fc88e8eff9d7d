"""API middleware: CORS, request logging and error handling.

Starlette middleware is a stack, last added runs first.  ``main.py`` adds
ErrorHandlingMiddleware before RequestLoggingMiddleware, so requests flow

    Client -> RequestLogging -> ErrorHandling -> route handler

and RequestLoggingMiddleware sees the final status code, including the
structured errors ErrorHandlingMiddleware produces.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from unstream.api.schemas import ErrorResponse
from unstream.utils.errors import InvalidQueryError, InvalidURLError, UnstreamError
from unstream.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Bad input is the caller's problem; anything else is ours.
_CLIENT_ERRORS: tuple[type[UnstreamError], ...] = (InvalidQueryError, InvalidURLError)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]``; the
        browser extension and the web client call from different origins.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def error_status(exc: UnstreamError) -> int:
    return 400 if isinstance(exc, _CLIENT_ERRORS) else 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``UnstreamError`` subclasses and return structured JSON errors.

    Invalid queries and URLs become 400 so a client can tell "you typed
    nothing" apart from an empty result list.  Other application errors
    become 500.  Stack traces stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except UnstreamError as exc:
            status_code = error_status(exc)
            log = _logger.warning if status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status_code,
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
