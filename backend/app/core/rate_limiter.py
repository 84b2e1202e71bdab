"""
Rate Limiting for the survey API
================================
Implements rate limiting using slowapi.

Only the login endpoint is limited (brute force protection). Storage defaults
to in-process memory; point RATE_LIMIT_STORAGE_URI at Redis when running more
than one worker.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: client IP address"""
    return f"ip:{get_remote_address(request)}"


# Create limiter instance
limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns the same ``{"error", "code"}`` shape as every other failure.
    """
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please try again later.",
            "code": "RATE_LIMITED",
        },
        headers={"Retry-After": "60"}
    )


def login_rate_limit():
    """Rate limit for the login endpoint (LOGIN_RATE_LIMIT)"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT)
