"""
Cart Reconciliation Engine.

Takes a client-declared desired cart (a full snapshot, never a delta),
reconciles it against the inventory ledger under row locks, moves the
reserved stock, and caches the resulting canonical cart.

Every call re-declares the whole cart, so replaying a request converges
to the same quantities with a zero stock delta the second time. Stock is
always moved as a locked delta from the previously cached quantity,
never written as an absolute value.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.constants import CartChangeType, CartMessages
from shared.config.logging import get_logger, mask_identity_key
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from storefront.models import InventoryItem
from storefront.repositories import InventoryRepository
from storefront.schemas.cart import (
    CanonicalCart,
    CanonicalCartLine,
    CartChange,
    CartLineInput,
    CartValidateRequest,
)
from .cache import CartCache
from .errors import CartCacheUnavailableError, CartPersistError, InventoryUnavailableError
from .identity import CartIdentity
from .pricing import build_cart, build_line, final_price, line_final_price
from .reader import CartReader

logger = get_logger(__name__)


@dataclass
class ReconciliationResult:
    """Outcome of one reconciliation call."""

    cart: CanonicalCart
    changes: list[CartChange] = field(default_factory=list)
    min_order_sum: int = 0
    is_min_order_reached: bool = True
    stock_by_offer_id: dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class _OfferSnapshot:
    """Pricing data of a kept row, captured before the transaction ends."""

    name: str
    unit_price: int
    discount_percent: Decimal | None


class CartReconciliationService:
    """
    Domain service reconciling declared carts against inventory.

    One call is one unit of work: a single transaction locking exactly the
    offer rows the call touches, then one cache write after commit.
    """

    def __init__(
        self,
        db: Session,
        cache: CartCache,
        min_order_sum: int | None = None,
    ):
        self._db = db
        self._cache = cache
        self._reader = CartReader(cache)
        self._repo = InventoryRepository(db)
        self._min_order_sum = settings.min_order_sum if min_order_sum is None else min_order_sum

    def validate_and_persist_cart(
        self,
        identity: CartIdentity,
        request: CartValidateRequest,
    ) -> ReconciliationResult:
        """
        Reconcile the declared cart for identity.

        Raises:
            CartCacheUnavailableError: previous cart could not be read (nothing changed)
            CartCacheCorruptError: previous cart exists but does not decode (nothing changed)
            InventoryUnavailableError: store transaction failed (rolled back, nothing changed)
            CartPersistError: stock committed but the new cart could not be cached
        """
        key = identity.cache_key

        previous = self._reader.get_or_create_cart(identity, strict=True)
        prev_qty = previous.quantities()

        desired_lines = self._collapse_lines(request.items)
        desired_qty = {offer_id: line.quantity for offer_id, line in desired_lines.items()}

        # Removals must release stock too, so lock the union, not just the desired set
        offer_ids = set(prev_qty) | set(desired_qty)

        changes: list[CartChange] = []
        try:
            rows = self._repo.lock_by_ids(offer_ids)
            next_qty = self._reconcile_rows(rows, offer_ids, prev_qty, desired_qty, changes)
            stock_by_offer_id = {
                offer_id: rows[offer_id].free_stock if offer_id in rows else 0
                for offer_id in sorted(offer_ids)
            }
            snapshots = {
                offer_id: _OfferSnapshot(
                    name=rows[offer_id].name,
                    unit_price=rows[offer_id].unit_price,
                    discount_percent=rows[offer_id].discount_percent,
                )
                for offer_id, qty in next_qty.items()
                if qty > 0
            }
            safe_commit(self._db)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(
                "Inventory transaction failed",
                identity_key=mask_identity_key(key),
                offers=len(offer_ids),
                error=str(e),
            )
            raise InventoryUnavailableError(key) from e

        lines = self._build_lines(desired_lines, next_qty, snapshots, previous, changes)
        cart = build_cart(identity.cart_token, request.delivery_slot, lines)

        try:
            self._cache.save(identity, cart)
        except CartCacheUnavailableError as e:
            logger.critical(
                "Stock committed but cart cache write failed",
                identity_key=mask_identity_key(key),
                stock_by_offer_id=stock_by_offer_id,
            )
            raise CartPersistError(key, stock_by_offer_id) from e

        logger.info(
            "Cart reconciled",
            identity_key=mask_identity_key(key),
            offers=len(offer_ids),
            lines=len(lines),
            changes=len(changes),
            total=cart.totals.total,
        )

        return ReconciliationResult(
            cart=cart,
            changes=changes,
            min_order_sum=self._min_order_sum,
            is_min_order_reached=cart.totals.total >= self._min_order_sum,
            stock_by_offer_id=stock_by_offer_id,
        )

    # -------------------------------------------------------------------------
    # Locked section
    # -------------------------------------------------------------------------

    def _reconcile_rows(
        self,
        rows: dict[int, InventoryItem],
        offer_ids: set[int],
        prev_qty: dict[int, int],
        desired_qty: dict[int, int],
        changes: list[CartChange],
    ) -> dict[int, int]:
        """Decide next quantities and move stock. Caller holds the row locks."""
        next_qty: dict[int, int] = {}

        for offer_id in sorted(offer_ids):
            prev = prev_qty.get(offer_id, 0)
            desired = desired_qty.get(offer_id, 0)
            row = rows.get(offer_id)
            changed = False

            if row is None or not row.is_orderable:
                nxt = 0
                if prev > 0 or desired > 0:
                    message = CartMessages.NOT_FOUND if row is None or not row.is_active else CartMessages.UNAVAILABLE
                    changes.append(self._change(CartChangeType.REMOVED, offer_id, message))
                    changed = True
            elif desired <= 0:
                nxt = 0
            else:
                # Keep what is already held, plus whatever is still free
                max_allowed = prev + max(0, row.free_stock)
                if desired > max_allowed:
                    nxt = max_allowed
                    changes.append(self._quantity_change(offer_id, max_allowed))
                    changed = True
                else:
                    nxt = desired

            if row is not None:
                nxt = self._apply_stock_delta(row, prev, nxt, changes, changed)
            next_qty[offer_id] = nxt

        return next_qty

    def _apply_stock_delta(
        self,
        row: InventoryItem,
        prev: int,
        nxt: int,
        changes: list[CartChange],
        changed: bool,
    ) -> int:
        """Move free stock by nxt - prev and return the quantity actually reserved."""
        delta = nxt - prev
        if delta > 0:
            if row.free_stock < delta:
                # Unreachable while the row lock is held; never go negative regardless
                granted = max(0, row.free_stock)
                logger.warning(
                    "Free stock shrank inside lock window, re-clamping",
                    offer_id=row.id,
                    requested=delta,
                    free_stock=row.free_stock,
                )
                nxt = prev + granted
                delta = granted
                if not changed:
                    changes.append(self._quantity_change(row.id, nxt))
            row.free_stock -= delta
        elif delta < 0:
            row.free_stock += -delta
        return nxt

    # -------------------------------------------------------------------------
    # Pure computation (outside the lock)
    # -------------------------------------------------------------------------

    def _build_lines(
        self,
        desired_lines: dict[int, CartLineInput],
        next_qty: dict[int, int],
        snapshots: dict[int, _OfferSnapshot],
        previous: CanonicalCart,
        changes: list[CartChange],
    ) -> list[CanonicalCartLine]:
        """Canonical lines in payload order, flagging price moves against the cached cart."""
        lines: list[CanonicalCartLine] = []
        for offer_id, requested in desired_lines.items():
            qty = next_qty.get(offer_id, 0)
            if qty <= 0:
                continue

            offer = snapshots[offer_id]
            line = build_line(
                offer_id=offer_id,
                name=offer.name,
                quantity=qty,
                unit_price=offer.unit_price,
                discount_percent=offer.discount_percent,
                comment=requested.comment,
                allow_replacement=requested.allow_replacement,
                is_favorite=requested.is_favorite,
            )

            cached_line = previous.line_for(offer_id)
            if cached_line is not None:
                old_price = line_final_price(cached_line)
                new_price = final_price(line.unit_price, line.discount_price)
                if old_price != new_price:
                    changes.append(
                        self._change(
                            CartChangeType.PRICE_CHANGED,
                            offer_id,
                            CartMessages.PRICE_CHANGED.format(old=old_price, new=new_price),
                        )
                    )

            lines.append(line)
        return lines

    @staticmethod
    def _collapse_lines(items: list[CartLineInput]) -> dict[int, CartLineInput]:
        """offer_id -> line; a repeated offer keeps its first position and its last declaration."""
        collapsed: dict[int, CartLineInput] = {}
        for item in items:
            collapsed[item.offer_id] = item
        return collapsed

    def _quantity_change(self, offer_id: int, available: int) -> CartChange:
        if available == 0:
            message = CartMessages.OUT_OF_STOCK
        else:
            message = CartMessages.AVAILABLE_ONLY.format(available=available)
        return self._change(CartChangeType.QUANTITY_CHANGED, offer_id, message)

    @staticmethod
    def _change(change_type: str, offer_id: int, message: str) -> CartChange:
        logger.info("Cart adjusted", type=change_type, offer_id=offer_id, reason=message)
        return CartChange(type=change_type, offer_id=offer_id, message=message)
