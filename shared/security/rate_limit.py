"""
Rate limiting utilities using slowapi.
Protects the public cart endpoints from abuse.

Usage in router:
    from shared.security.rate_limit import limiter

    @router.post("/validate")
    @limiter.limit("30/minute")
    def validate_cart(request: Request, ...):
        ...

Common limits:
- "60/minute" for cart reads
- "30/minute" for cart reconciliation (takes row locks)
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.logging import get_logger

logger = get_logger(__name__)

# Limiter keyed by client IP
limiter = Limiter(key_func=get_remote_address)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.
    Returns a JSON response with retry information.
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
            "detail": "Rate limit exceeded. Please try again later.",
            "retry_after": exc.detail,
        },
        headers={"Retry-After": str(exc.detail)},
    )
