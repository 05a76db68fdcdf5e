# backend/portfolio_tracker/middleware/rate_limit.py
"""
Rate limiting with slowapi.

Keeps a single client from hammering the API and, through it, the Yahoo
Finance quota shared by every user. Keyed by client IP; forwarded headers
are only honoured when the immediate peer is a trusted proxy.

Usage:
    from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_MARKET_DATA

    @router.get("/quotes/{symbol}")
    @limiter.limit(RATE_LIMIT_MARKET_DATA)
    def get_quote(request: Request, symbol: str):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from portfolio_tracker.config import settings
from portfolio_tracker.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_WRITE,
    RATE_LIMIT_MARKET_DATA,
    RATE_LIMIT_HEALTH,
)

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60


def _get_client_ip(request: Request) -> str:
    """Client IP, trusting X-Forwarded-For / X-Real-IP only behind a known proxy."""
    peer_ip = get_remote_address(request)
    trusted = settings.trust_proxy_headers or peer_ip in settings.trusted_proxy_ips

    if trusted:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return peer_ip


limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=not settings.is_test,
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Return 429 in the standard error shape with a Retry-After header."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"
    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": DEFAULT_RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(DEFAULT_RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_WRITE",
    "RATE_LIMIT_MARKET_DATA",
    "RATE_LIMIT_HEALTH",
]
