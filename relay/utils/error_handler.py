"""
Exception handlers that turn errors into plain-text HTTP responses.

The relay's HTTP surface only serves static files, so errors are reported
the way a static file server would: a short text body and a status code.
"""

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from relay.constants import NOT_FOUND_BODY
from relay.exceptions import AppException
from relay.logging import logger


async def app_exception_handler(
    request: Request, exc: AppException
) -> PlainTextResponse:
    """
    Convert an AppException raised by an HTTP endpoint into a response.

    Args:
        request: The failing request.
        exc: The raised application exception.

    Returns:
        Plain-text response with the exception's HTTP status.
    """
    logger.warning(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
    )
    return PlainTextResponse(exc.message, status_code=exc.http_status)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    """Plain-text replacement for FastAPI's JSON ``{"detail": ...}`` errors."""
    if exc.status_code == 404:
        return PlainTextResponse(NOT_FOUND_BODY, status_code=404)
    return PlainTextResponse(
        str(exc.detail), status_code=exc.status_code, headers=exc.headers
    )
