"""
Error Types and Handlers

Exception types raised across the AURA server and the FastAPI handlers that
turn them into JSON responses.

Policy
------
- Retrieval-stage failures stay local to their source (logged, empty result).
- A completion failure is the only request-level failure: 502, never retried.
- Anything else that escapes a route becomes a generic 500.
- Response bodies are always ``{"error": <code>, "detail": <message>}`` and
  never carry exception text.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("aura.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class CompletionError(RuntimeError):
    """Raised when the completion service fails or times out for a request."""


class ReferenceDataError(RuntimeError):
    """Raised when a static reference table exists but cannot be parsed."""


def error_body(code: str, detail: str) -> dict:
    return {"error": code, "detail": detail}


# ---------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------

async def completion_error_handler(
    request: Request,
    exc: CompletionError,
) -> JSONResponse:
    """
    Map a ``CompletionError`` to ``502 Bad Gateway``.

    Parameters
    ----------
    request : Request
        Request whose completion failed.

    exc : CompletionError
        The failure; logged, not returned.

    Returns
    -------
    JSONResponse
        ``{"error": "completion_failed", "detail": "Failed to generate response"}``
    """
    logger.error(
        "Completion failed for %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(
        status_code=502,
        content=error_body("completion_failed", "Failed to generate response"),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Last-resort handler: log the traceback, answer ``500`` with a fixed body.
    """
    logger.exception(
        "Unhandled error in %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=error_body("internal_server_error", "Internal server error"),
    )
