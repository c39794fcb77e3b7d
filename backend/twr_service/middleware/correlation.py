# backend/twr_service/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

Correlation ID Sources (in order of precedence):
1. X-Correlation-ID header (from client or upstream service)
2. X-Request-ID header (alternative header name)
3. Generated UUID4 if neither header is present

The ID is stored in the request context for the duration of the request
(so log lines from the calculator carry it) and echoed back in the
X-Correlation-ID response header.

Usage:
    from fastapi import FastAPI
    from twr_service.middleware import CorrelationIdMiddleware

    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
"""

import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from twr_service.utils.context import reset_correlation_id, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


def _resolve_correlation_id(request: Request) -> str:
    """Take the caller's correlation ID if it sent one, otherwise generate one."""
    return (
        request.headers.get(CORRELATION_ID_HEADER)
        or request.headers.get(REQUEST_ID_HEADER)
        or str(uuid.uuid4())
    )


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to every request, its logs and its response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = _resolve_correlation_id(request)
        token = set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            reset_correlation_id(token)
