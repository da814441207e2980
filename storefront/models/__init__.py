"""
SQLAlchemy ORM Models Package.

- base: Base class and TimestampMixin
- inventory: InventoryItem (authoritative stock ledger)

Canonical carts are not relational: they live in the Redis cart cache.
"""

from .base import Base, TimestampMixin
from .inventory import InventoryItem

__all__ = [
    "Base",
    "TimestampMixin",
    "InventoryItem",
]
