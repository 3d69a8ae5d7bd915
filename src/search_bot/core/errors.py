"""
Error Taxonomy and Global Error Handling

This module defines the exceptions raised across the bot and the FastAPI
exception handlers that turn them into HTTP responses.

Taxonomy
--------
- ConfigurationError : required endpoint / credential / deployment missing.
                       Fatal at construction or at the start of a batch job.
- RetrievalError     : an outbound search or embedding call failed.
                       Propagated to the caller, never retried here.
- IndexSetupError    : index provisioning could not be completed.
- ChatModelError     : the chat-completion call failed.

Empty search results and token-budget truncation are not errors; they are
reported through `RenderedContext`.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("search_bot.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class SearchBotError(RuntimeError):
    """Base class for all search-bot failures."""


class ConfigurationError(SearchBotError):
    """Raised when required configuration is missing."""

    def __init__(self, missing: Iterable[str] | str) -> None:
        if isinstance(missing, str):
            self.missing = [missing]
        else:
            self.missing = list(missing)
        super().__init__(
            "Missing required configuration: " + ", ".join(self.missing)
        )


class RetrievalError(SearchBotError):
    """Raised when an external search or embedding call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class IndexNotFoundError(RetrievalError):
    """The search service reported that the index does not exist."""


class EmbeddingError(RetrievalError):
    """Raised when embedding generation fails."""


class IndexSetupError(SearchBotError):
    """Raised when an index cannot be looked up, created or made ready."""


class ChatModelError(SearchBotError):
    """Raised when the chat-completion call fails."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def upstream_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handler for failures of the external services the bot depends on.

    Retrieval and chat-model failures are not bugs in this process, so they
    map to 502 rather than 500. The exception text is logged, not returned.
    """
    logger.error(
        "Upstream failure during request %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "upstream_service_error",
        "detail": "An external service failed to respond",
    }
    return JSONResponse(status_code=502, content=payload)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

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
