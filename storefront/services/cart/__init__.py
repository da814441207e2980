"""
Cart services.

    Router (thin controller)
        ↓
    CartReader / CartReconciliationService   ← business logic
        ↓                      ↓
    CartCache (Redis)     InventoryRepository (row locks)

Usage:
    from storefront.services.cart import CartIdentity, CartReconciliationService

    service = CartReconciliationService(db, cache)
    result = service.validate_and_persist_cart(identity, request)
"""

from .identity import CartIdentity, new_cart_token
from .cache import CartCache, get_cart_cache
from .reader import CartReader
from .reconciliation import CartReconciliationService, ReconciliationResult
from .errors import (
    CartError,
    CartCacheUnavailableError,
    InventoryUnavailableError,
    CartPersistError,
    CartCacheCorruptError,
)

__all__ = [
    "CartIdentity",
    "new_cart_token",
    "CartCache",
    "get_cart_cache",
    "CartReader",
    "CartReconciliationService",
    "ReconciliationResult",
    "CartError",
    "CartCacheUnavailableError",
    "InventoryUnavailableError",
    "CartPersistError",
    "CartCacheCorruptError",
]
