"""
Cart Reader: the cheap read path.

Returns the cached canonical cart verbatim, creating and caching an empty
one on first access. Never touches the inventory store.
"""

from shared.config.logging import get_logger, mask_identity_key
from storefront.schemas.cart import CanonicalCart
from .cache import CartCache
from .errors import CartCacheCorruptError, CartCacheUnavailableError
from .identity import CartIdentity
from .pricing import empty_cart

logger = get_logger(__name__)


class CartReader:
    """Read-through access to canonical carts."""

    def __init__(self, cache: CartCache):
        self._cache = cache

    def get_or_create_cart(self, identity: CartIdentity, *, strict: bool = False) -> CanonicalCart:
        """
        Return the cached cart for identity, creating an empty one on a miss.

        strict=False (display path): a cache outage is logged and an empty
        cart is returned without being written, so an unreadable but
        existing cart is never overwritten.

        strict=True (reconciliation path): a cache outage raises
        CartCacheUnavailableError, because an empty result would look like
        "nothing was reserved" and the held stock would never be released.

        An undecodable cached cart is handled the same way: raised when
        strict, otherwise an empty cart is served and the entry is kept.
        """
        key = identity.cache_key
        try:
            cached = self._cache.load(identity)
        except (CartCacheUnavailableError, CartCacheCorruptError) as e:
            if strict:
                raise
            logger.warning(
                "Cart cache read failed, serving empty cart",
                identity_key=mask_identity_key(key),
                reason=type(e).__name__,
            )
            return empty_cart(identity.cart_token)

        if cached is not None:
            return cached

        cart = empty_cart(identity.cart_token)
        try:
            self._cache.save(identity, cart)
        except CartCacheUnavailableError:
            if strict:
                raise
            logger.warning(
                "Failed to cache empty cart",
                identity_key=mask_identity_key(key),
            )
        else:
            logger.debug("Created empty cart", identity_key=mask_identity_key(key))
        return cart
