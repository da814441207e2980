"""
Cart identity resolution for HTTP requests.

Anonymous shoppers are identified by a long-lived cart token cookie; an
optional bearer token adds the authenticated user id, which takes
priority when keying the cart.
"""

from fastapi import Header, Request, Response

from shared.config.constants import Limits
from shared.config.settings import settings
from shared.security.auth import user_id_from_authorization
from storefront.services.cart import CartIdentity, new_cart_token


def _set_cart_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cart_token_cookie_name,
        value=token,
        max_age=settings.cart_token_cookie_max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        path="/",
    )


def resolve_cart_identity(
    request: Request,
    response: Response,
    authorization: str | None = Header(default=None),
) -> CartIdentity:
    """
    FastAPI dependency resolving the CartIdentity of a request.

    Issues a new cart token cookie when the request carries none (or an
    unusable one). An invalid bearer token is rejected with 401.
    """
    token = request.cookies.get(settings.cart_token_cookie_name)
    if not token or len(token) > Limits.MAX_CART_TOKEN_LENGTH:
        token = new_cart_token()
        _set_cart_token_cookie(response, token)

    return CartIdentity(
        cart_token=token,
        user_id=user_id_from_authorization(authorization),
    )
