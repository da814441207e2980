"""
Inventory Models: the authoritative table of sellable items.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import Limits
from .base import Base, TimestampMixin


class InventoryItem(TimestampMixin, Base):
    """
    A sellable item (an "offer") with its price and free stock.

    free_stock is stock NOT reserved by any cart: it is already net of
    every quantity currently held in canonical carts. It is only mutated
    under a row lock inside a transaction (cart reconciliation here,
    order fulfillment elsewhere).

    is_active: the item still exists in the catalog (False = retired).
    is_available: the item can be ordered right now (False = paused).
    """

    __tablename__ = "inventory_item"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # Whole currency units
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    free_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("free_stock >= 0", name="ck_inventory_item_free_stock"),
        CheckConstraint("unit_price >= 0", name="ck_inventory_item_unit_price"),
        CheckConstraint(
            "discount_percent IS NULL OR "
            f"(discount_percent >= 0 AND discount_percent <= {Limits.MAX_DISCOUNT_PERCENT})",
            name="ck_inventory_item_discount_percent",
        ),
    )

    @property
    def is_orderable(self) -> bool:
        """Active in the catalog and currently available."""
        return bool(self.is_active and self.is_available)

    def __repr__(self) -> str:
        return f"<InventoryItem(id={self.id}, name={self.name!r}, free_stock={self.free_stock})>"
