"""
Redis constants and configuration.
Centralizes TTLs and key prefixes for better visibility and management.
"""

from shared.config.settings import settings

# =============================================================================
# TTL (Time To Live) Constants (in seconds)
# =============================================================================

# Canonical carts: refreshed on every reconciliation and on empty-cart creation
CART_CACHE_TTL = settings.cart_cache_ttl_seconds


# =============================================================================
# Key Prefixes
# =============================================================================

PREFIX_CART = settings.cart_cache_prefix


def get_cart_cache_key(identity_key: str, prefix: str = PREFIX_CART) -> str:
    """Generate the Redis key for a canonical cart ("cart:user:42", "cart:token:ab12...")."""
    return f"{prefix}{identity_key}"
