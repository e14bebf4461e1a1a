"""HTTP error mapping for the package's exception taxonomy.

Every handler logs internally and returns a small, deterministic
``{"error", "detail"}`` body.  Unknown exceptions fall through to the
catch-all handler and never leak internals.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from firesafety_rag.errors import (
    AuthenticationError,
    CollectionNotReadyError,
    ConfigurationError,
    NoResultError,
    RagError,
    RateLimitError,
    TransientNetworkError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
_STATUS_BY_ERROR: list[tuple[type[RagError], int, str]] = [
    (NoResultError, 404, "no_result"),
    (ConfigurationError, 400, "configuration_error"),
    (RateLimitError, 429, "rate_limited"),
    (TransientNetworkError, 503, "upstream_unavailable"),
    (CollectionNotReadyError, 503, "collection_not_ready"),
    (AuthenticationError, 502, "upstream_authentication_failed"),
]


async def rag_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate a :class:`RagError` into a non-2xx response."""
    for error_type, status_code, kind in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code, kind = 500, "internal_error"

    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)

    return JSONResponse(status_code=status_code, content={"error": kind, "detail": str(exc)})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, return a generic 500."""
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RagError, rag_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
