"""
Repository Pattern implementation.
Centralizes data access for the inventory ledger.

Usage:
    from storefront.repositories import InventoryRepository

    repo = InventoryRepository(db)
    rows = repo.lock_by_ids({101, 102})
"""

from .inventory import InventoryRepository

__all__ = [
    "InventoryRepository",
]
