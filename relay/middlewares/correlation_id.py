"""
Middleware for request correlation ID tracking.

HTTP requests get their ID here. WebSocket connections set theirs in the
relay endpoint, since BaseHTTPMiddleware only sees HTTP scopes.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Context variable for storing correlation ID per request
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"
CORRELATION_ID_LENGTH = 8


def new_correlation_id(candidate: str | None = None) -> str:
    """
    Return an 8-char correlation ID from a candidate or a fresh UUID.

    Args:
        candidate: Incoming ID (e.g. from a header), may be empty.

    Returns:
        Correlation ID limited to 8 characters.
    """
    cid = candidate or str(uuid.uuid4())
    return cid[:CORRELATION_ID_LENGTH]


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each HTTP request with a correlation ID.

    The ID is taken from the ``X-Correlation-ID`` header when present and
    otherwise generated. It is exposed as ``request.state.request_id``,
    picked up by the log formatters, and returned in the response header.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = new_correlation_id(request.headers.get(CORRELATION_ID_HEADER))

        request.state.request_id = cid
        correlation_id.set(cid)

        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = cid

        return response


def get_correlation_id() -> str:
    """
    Get the correlation ID for the current request context.

    Returns:
        The correlation ID string, or empty string if not set.
    """
    return correlation_id.get()
