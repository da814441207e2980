"""
Redis infrastructure: connection pool and key conventions.
"""

from shared.infrastructure.redis.pool import (
    get_redis_sync_client,
    close_redis_sync_pool,
)
from shared.infrastructure.redis.constants import (
    CART_CACHE_TTL,
    PREFIX_CART,
    get_cart_cache_key,
)

__all__ = [
    "get_redis_sync_client",
    "close_redis_sync_pool",
    "CART_CACHE_TTL",
    "PREFIX_CART",
    "get_cart_cache_key",
]
