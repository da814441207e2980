"""
Bearer token verification.

Access tokens are issued by the external auth service; this module only
verifies them (HS256, issuer and audience checked) and extracts the
authenticated user id used to key the shopper's cart.
"""

from __future__ import annotations

from typing import Any

import jwt

from shared.config.settings import JWT_SECRET, JWT_ISSUER, JWT_AUDIENCE
from shared.config.logging import get_logger
from shared.utils.exceptions import UnauthorizedError

logger = get_logger(__name__)


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT access token.

    Args:
        token: The JWT token string.

    Returns:
        Decoded token claims.

    Raises:
        UnauthorizedError: If token is invalid, expired, or lacks a usable subject.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError as e:
        # Log the actual error, return a generic message to the client
        logger.warning("JWT validation failed", error=str(e))
        raise UnauthorizedError("Invalid token")

    if "sub" not in payload:
        raise UnauthorizedError("Invalid token: missing subject claim")

    if payload.get("type") not in ("access", None):  # None for legacy tokens
        raise UnauthorizedError("Invalid token: invalid type claim")

    try:
        int(payload["sub"])
    except (ValueError, TypeError):
        raise UnauthorizedError("Invalid token: malformed subject claim")

    return payload


def user_id_from_authorization(authorization: str | None) -> int | None:
    """
    Resolve the user id from an optional "Authorization: Bearer <jwt>" header.

    No header means an anonymous shopper (None). A header that is present
    but malformed or invalid is rejected rather than silently downgraded,
    otherwise a logged-in shopper would be shown the anonymous cart.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Invalid authorization header")

    payload = verify_jwt(token.strip())
    return int(payload["sub"])
