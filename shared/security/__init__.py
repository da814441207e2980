"""
Security module: bearer token verification and rate limiting.
"""

from shared.security.auth import verify_jwt, user_id_from_authorization
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    "verify_jwt",
    "user_id_from_authorization",
    "limiter",
    "rate_limit_exceeded_handler",
]
