"""
Error handlers for the search API.

Maps the search error taxonomy onto HTTP responses and logs every failure with
diagnostic context.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import RateLimitExceeded, SearchError


# Configure logging
logger = logging.getLogger(__name__)


def error_payload(error: SearchError) -> Dict[str, Any]:
    """
    Build the JSON body for a search error.

    Args:
        error: The raised search error

    Returns:
        Dictionary with a stable error code and a human-readable message
    """
    return {
        "error": error.error_code,
        "message": error.message,
    }


async def handle_search_error(request: Request, error: SearchError) -> JSONResponse:
    """Convert a SearchError into its mapped status code."""
    _log_error(request, error)

    headers = {}
    if isinstance(error, RateLimitExceeded):
        headers["Retry-After"] = str(error.retry_after_seconds)

    return JSONResponse(
        status_code=error.status_code,
        content=error_payload(error),
        headers=headers,
    )


async def handle_unexpected_error(request: Request, error: Exception) -> JSONResponse:
    """Last-resort handler; never leaks internals to the caller."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {error}")
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": "Internal Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Attach the search error handlers to an application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(SearchError, handle_search_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def _log_error(request: Request, error: SearchError) -> None:
    """
    Log error with timestamp, request context, and diagnostic data.

    Rate-limit and validation failures are client errors and logged as
    warnings; everything else is an error.
    """
    context = {
        'timestamp': datetime.now().isoformat(),
        'method': request.method,
        'path': request.url.path,
        'error_type': type(error).__name__,
        'status_code': error.status_code,
        'error_message': error.message,
    }

    if error.status_code < 500:
        logger.warning(
            f"Request rejected: {request.method} {request.url.path} | "
            f"{type(error).__name__}: {error.message}"
        )
    else:
        logger.error(
            f"Request failed: {request.method} {request.url.path} | "
            f"{type(error).__name__}: {error.message}"
        )
    logger.debug(f"Full error context: {context}")
