# backend/twr_service/middleware/rate_limit.py
"""
Rate limiting for API protection.

TWR requests may carry tens of thousands of points each, so calculation
endpoints are limited per client using slowapi.

Key by: Client IP address (X-Forwarded-For only from trusted proxies)
Storage: In-memory (single instance)

Limits are defined in twr_service/services/constants.py. Rate limiting can
be turned off with RATE_LIMIT_ENABLED=false (it is off by default in test).

Usage:
    from twr_service.middleware.rate_limit import limiter, RATE_LIMIT_TWR

    @router.post("/twr")
    @limiter.limit(RATE_LIMIT_TWR)
    def calculate(request: Request, ...):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from twr_service.config import settings
from twr_service.schemas.errors import ErrorDetail
from twr_service.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_TWR,
)

logger = logging.getLogger(__name__)

# Seconds advertised in Retry-After when a limit is hit
RETRY_AFTER_SECONDS = 60


def _get_client_ip(request: Request) -> str:
    """
    Extract the client IP address used as the rate limit key.

    Forwarded headers are only honoured when the immediate peer is a trusted
    proxy, otherwise any client could pick its own key.
    """
    peer_ip = get_remote_address(request)

    if settings.trust_proxy_headers or peer_ip in settings.trusted_proxy_ips:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # First entry is the original client
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return peer_ip


limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    Return 429 in the standard ErrorDetail format with a Retry-After header.
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content=ErrorDetail(
            error="RateLimitError",
            message=f"Too many requests. {limit_info}",
            details={"retry_after": RETRY_AFTER_SECONDS},
        ).model_dump(),
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_TWR",
    "RATE_LIMIT_HEALTH",
]
