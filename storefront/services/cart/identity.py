"""
Cart identity: whose cart a request is about.
"""

import uuid
from dataclasses import dataclass

from shared.config.constants import IdentityKind


@dataclass(frozen=True)
class CartIdentity:
    """
    An opaque anonymous cart token plus an optional authenticated user id.

    The user id always wins when building the cache key, so logging in
    surfaces the user's own cart instead of the anonymous one.
    """

    cart_token: str
    user_id: int | None = None

    @property
    def cache_key(self) -> str:
        if self.user_id is not None:
            return f"{IdentityKind.USER}:{self.user_id}"
        return f"{IdentityKind.TOKEN}:{self.cart_token}"

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def new_cart_token() -> str:
    """Generate a fresh anonymous cart token."""
    return uuid.uuid4().hex
