# backend/app/utils/__init__.py
"""
Utility modules for the Stock Portfolio Analytics service.

Cross-cutting utilities used throughout the application:
- logging: Logging configuration with correlation ID support
- context: Request context (correlation ID, route)

Usage:
    from app.utils import setup_logging, get_logger
    from app.utils import get_correlation_id, set_correlation_id
"""

from app.utils.context import (
    get_correlation_id,
    set_correlation_id,
    reset_correlation_id,
    get_request_route,
    set_request_route,
    reset_request_route,
)
from app.utils.logging import setup_logging, get_logger

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_id",
    "get_request_route",
    "set_request_route",
    "reset_request_route",
]
