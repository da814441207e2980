"""
Centralized constants for the backend application.
Avoids magic strings and repeated constants.

Usage:
    from shared.config.constants import CartChangeType, CartMessages, Limits

    if change.type == CartChangeType.REMOVED:
        ...
"""

from typing import Final


# =============================================================================
# Cart Change Types
# =============================================================================


class CartChangeType:
    """Automatic corrections the reconciliation engine reports back to the client."""

    REMOVED: Final[str] = "removed"
    PRICE_CHANGED: Final[str] = "price_changed"
    QUANTITY_CHANGED: Final[str] = "quantity_changed"


class CartMessages:
    """Human-readable messages attached to cart changes."""

    NOT_FOUND: Final[str] = "Item is no longer sold"
    UNAVAILABLE: Final[str] = "Item is unavailable"
    OUT_OF_STOCK: Final[str] = "Out of stock"
    AVAILABLE_ONLY: Final[str] = "Available only {available}"
    PRICE_CHANGED: Final[str] = "Price changed from {old} to {new}"


# =============================================================================
# Cache Key Kinds
# =============================================================================


class IdentityKind:
    """Prefixes of the per-identity cart cache key."""

    USER: Final[str] = "user"
    TOKEN: Final[str] = "token"


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Desired quantity ceiling; anything at or below 0 means "remove"
    MAX_QUANTITY: Final[int] = 10_000

    # Items per declared cart
    MAX_CART_LINES: Final[int] = 200

    # String lengths
    MAX_COMMENT_LENGTH: Final[int] = 500
    MAX_DELIVERY_SLOT_LENGTH: Final[int] = 100
    MAX_CART_TOKEN_LENGTH: Final[int] = 128

    # Discount, enforced by the inventory_item CHECK constraint
    MAX_DISCOUNT_PERCENT: Final[int] = 100
