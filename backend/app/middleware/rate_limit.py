# backend/app/middleware/rate_limit.py
"""
Rate limiting for API protection.

Uses slowapi to cap requests per client. Limits come from
app/services/constants.py and are applied per endpoint type:
- RATE_LIMIT_ANALYTICS: statistics and forecasts (quadratic in holdings)
- RATE_LIMIT_WRITE: manual price entry
- RATE_LIMIT_DEFAULT: reads
- RATE_LIMIT_HEALTH: probes

Key by: Client IP address (forwarded headers only from trusted proxies)
Storage: In-memory (single instance)

Usage:
    from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS

    @router.post("/statistics")
    @limiter.limit(RATE_LIMIT_ANALYTICS)
    def compute(request: Request, ...):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import settings
from app.services.constants import (
    RATE_LIMIT_ANALYTICS,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_WRITE,
)

logger = logging.getLogger(__name__)

# Seconds suggested to the client in Retry-After
RETRY_AFTER_SECONDS = 60


def _is_trusted_proxy(request: Request) -> bool:
    """True if the immediate peer may set X-Forwarded-For / X-Real-IP."""
    if settings.trust_proxy_headers:
        return True
    return get_remote_address(request) in settings.trusted_proxy_ips


def _get_client_ip(request: Request) -> str:
    """
    Client IP used as the rate limit key.

    Forwarded headers are honored only from trusted proxies, so a client
    cannot pick its own bucket by sending X-Forwarded-For.
    """
    if _is_trusted_proxy(request):
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # First entry is the original client
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return get_remote_address(request)


limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 response in the standard error envelope, with Retry-After."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_WRITE",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_ANALYTICS",
]
