"""unstream API layer: routes, schemas and middleware."""

from unstream.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from unstream.api.routes import router
from unstream.api.schemas import (
    EnrichRequest,
    ErrorResponse,
    HealthResponse,
    ReleaseCheckRequest,
    ReleaseCheckResponse,
    SourcesResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "EnrichRequest",
    "ErrorResponse",
    "HealthResponse",
    "ReleaseCheckRequest",
    "ReleaseCheckResponse",
    "SourcesResponse",
]
