"""
Error Taxonomy and Global Error Handling

This module defines the domain exceptions shared across the service and the
FastAPI exception handlers that render them.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Carry enough context (query, reason) for callers to render precise messages
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("srag.errors")


# ---------------------------------------------------------------------
# Domain Exceptions
# ---------------------------------------------------------------------

class SyllabusRAGError(Exception):
    """Base class for all service-level errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def context(self) -> Dict[str, Any]:
        """Extra fields merged into the JSON error payload."""
        return {}


class OutOfScopeError(SyllabusRAGError):
    """Raised when the scope gate rejects a query."""

    status_code = 403
    error_code = "out_of_scope"

    def __init__(self, reason: str, query: str) -> None:
        super().__init__("Query is outside syllabus scope")
        self.reason = reason
        self.query = query

    def context(self) -> Dict[str, Any]:
        return {"reason": self.reason, "query": self.query}


class NotFoundError(SyllabusRAGError):
    """Raised when a syllabus, topic or document does not exist."""

    status_code = 404
    error_code = "not_found"


class InvalidRequestError(SyllabusRAGError):
    """Raised for malformed requests that pass schema validation."""

    status_code = 400
    error_code = "invalid_request"


class StoragePersistenceError(SyllabusRAGError):
    """Raised when a store cannot read or write its backing file."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def service_error_handler(
    request: Request,
    exc: SyllabusRAGError,
) -> JSONResponse:
    """
    Render a domain exception as a JSON error response.

    Client errors (4xx) carry the exception message and context. Server-side
    failures are logged with their traceback and rendered generically.
    """
    if exc.status_code >= 500:
        logger.error(
            "%s during request: %s %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc_info=exc,
        )
        payload: Dict[str, Any] = {
            "error": exc.error_code,
            "detail": "Internal server error",
        }
    else:
        logger.info(
            "%s for %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc,
        )
        payload = {
            "error": exc.error_code,
            "detail": str(exc),
            **exc.context(),
        }

    return JSONResponse(status_code=exc.status_code, content=payload)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    This handler is registered as the final safety net for any exception not
    otherwise handled by route-level or domain handlers.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )


def describe(exc: Optional[BaseException]) -> str:
    """Short, log-safe description of an exception."""
    if exc is None:
        return "none"
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__
