"""
Cart Cache Adapter.

Stores one JSON-serialized CanonicalCart per identity in Redis. Every
write is a full replacement with the standard TTL; there are no
field-level updates, so what the client sees is always exactly what the
last reconciliation computed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis
from pydantic import ValidationError

from shared.config.logging import get_logger, mask_identity_key
from shared.infrastructure.redis import (
    CART_CACHE_TTL,
    PREFIX_CART,
    get_cart_cache_key,
    get_redis_sync_client,
)
from storefront.schemas.cart import CanonicalCart
from .errors import CartCacheCorruptError, CartCacheUnavailableError

if TYPE_CHECKING:
    from .identity import CartIdentity

logger = get_logger(__name__)


class CartCache:
    """
    Key/value cache of canonical carts.

    The client only needs redis-py's get(key) and set(key, value, ex=ttl).
    Keys passed to get()/set() are identity keys ("user:42"); the
    namespace prefix is added here.
    """

    def __init__(
        self,
        client: "redis.Redis",
        ttl_seconds: int = CART_CACHE_TTL,
        prefix: str = PREFIX_CART,
    ):
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._prefix = prefix

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(get_cart_cache_key(key, self._prefix))
        except redis.RedisError as e:
            raise CartCacheUnavailableError("read", key) from e

    def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        ttl = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError(f"Cart cache TTL must be positive, got {ttl}")
        try:
            self._client.set(
                get_cart_cache_key(key, self._prefix),
                value,
                ex=ttl,
            )
        except redis.RedisError as e:
            raise CartCacheUnavailableError("write", key) from e

    def load(self, identity: "CartIdentity") -> CanonicalCart | None:
        """
        Deserialize the cached cart, or None on a miss.

        An entry that no longer parses raises CartCacheCorruptError and is
        left in place: it still records the stock this cart holds.
        """
        raw = self.get(identity.cache_key)
        if raw is None:
            return None
        try:
            return CanonicalCart.model_validate_json(raw)
        except ValidationError as e:
            logger.error(
                "Cached cart could not be decoded",
                identity_key=mask_identity_key(identity.cache_key),
                error=str(e),
            )
            raise CartCacheCorruptError(identity.cache_key) from e

    def save(self, identity: "CartIdentity", cart: CanonicalCart) -> None:
        """Replace the cached cart for identity and refresh its TTL."""
        self.set(identity.cache_key, cart.model_dump_json(by_alias=True))


def get_cart_cache() -> CartCache:
    """
    FastAPI dependency returning a cache backed by the shared Redis pool.

    Tests override this dependency with an in-memory client.
    """
    return CartCache(get_redis_sync_client())
