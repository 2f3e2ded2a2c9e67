# backend/app/utils/context.py
"""
Request-scoped context for log correlation.

Holds the correlation ID and the request route for the request being
served. Values live in contextvars, so they follow the request into
FastAPI's threadpool (sync endpoints) and across await points.

Usage:
    from app.utils.context import get_correlation_id, set_correlation_id

    # In middleware
    token = set_correlation_id("abc-123")
    ...
    reset_correlation_id(token)

    # Anywhere while the request is served
    get_correlation_id()  # "abc-123"
"""

from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_request_route_var: ContextVar[str | None] = ContextVar("request_route", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the current request, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> Token:
    """Set the correlation ID; returns a token for reset_correlation_id()."""
    return _correlation_id_var.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    """Restore the correlation ID that was current before set_correlation_id()."""
    _correlation_id_var.reset(token)


def get_request_route() -> str | None:
    """'METHOD /path' of the current request, or None outside a request."""
    return _request_route_var.get()


def set_request_route(method: str, path: str) -> Token:
    return _request_route_var.set(f"{method} {path}")


def reset_request_route(token: Token) -> None:
    _request_route_var.reset(token)
