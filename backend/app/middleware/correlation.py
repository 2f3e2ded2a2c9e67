# backend/app/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

For each request the middleware:
1. Takes the correlation ID from X-Correlation-ID, then X-Request-ID,
   or generates a UUID4
2. Stores it (and "METHOD /path") in context for the logging filter
3. Echoes it in the X-Correlation-ID response header

Usage:
    app.add_middleware(CorrelationIdMiddleware)

Client Usage:
    curl -H "X-Correlation-ID: my-trace-123" http://localhost:8000/health
"""

import logging
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.utils.context import (
    reset_correlation_id,
    reset_request_route,
    set_correlation_id,
    set_request_route,
)

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Upper bound for client-supplied IDs; longer values are replaced
MAX_CORRELATION_ID_LENGTH = 128


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Manages the per-request correlation ID."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        correlation_id = self._get_correlation_id(request)

        id_token = set_correlation_id(correlation_id)
        route_token = set_request_route(request.method, request.url.path)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            reset_request_route(route_token)
            reset_correlation_id(id_token)

    @staticmethod
    def _get_correlation_id(request: Request) -> str:
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header, "").strip()
            if value and len(value) <= MAX_CORRELATION_ID_LENGTH:
                return value
            if value:
                logger.debug(f"Ignoring oversized {header} header ({len(value)} chars)")
        return str(uuid.uuid4())
