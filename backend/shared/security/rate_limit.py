"""
Rate limiting for public endpoints using slowapi.

Limits are keyed on the client IP and held in process memory.

Usage:
    from shared.security.rate_limit import limiter

    @router.post("/session/open")
    @limiter.limit(settings.session_open_rate_limit)
    def open_session(request: Request, ...):
        ...

Endpoints decorated with @limiter.limit must accept `request: Request`.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)

# Create limiter instance using client IP as key
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Handler for rate limit exceeded errors.
    Returns the standard error body with retry information.
    """
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded. Try again later.",
            "limit": str(exc.detail),
        },
    )
