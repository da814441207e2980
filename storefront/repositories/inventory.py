"""
Inventory Repository - Data access for the stock ledger.

Row locks are taken here and nowhere else: callers own the transaction
and must commit or roll back after lock_by_ids().
"""

from collections.abc import Iterable
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.models import InventoryItem


class InventoryRepository:
    """Repository for InventoryItem rows."""

    def __init__(self, db: Session):
        self._db = db

    def lock_by_ids(self, offer_ids: Iterable[int]) -> dict[int, InventoryItem]:
        """
        SELECT ... FOR UPDATE every row in offer_ids, in one statement.

        Rows are locked in ascending id order so that two transactions
        touching overlapping offers always queue in the same order and
        cannot deadlock. Missing ids are simply absent from the result.
        Rows already in the session are overwritten with the locked values.
        """
        ids = sorted(set(offer_ids))
        if not ids:
            return {}

        rows = self._db.scalars(
            select(InventoryItem)
            .where(InventoryItem.id.in_(ids))
            .order_by(InventoryItem.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).all()
        return {row.id: row for row in rows}

    def list_all(self, include_inactive: bool = False) -> Sequence[InventoryItem]:
        """All items ordered by id."""
        query = select(InventoryItem).order_by(InventoryItem.id)
        if not include_inactive:
            query = query.where(InventoryItem.is_active.is_(True))
        return self._db.scalars(query).all()
