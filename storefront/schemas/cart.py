"""
Cart Pydantic schemas.

Field names are snake_case in Python and camelCase on the wire (and in
the cart cache), so cached carts and HTTP payloads share one format.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.config.constants import Limits


CartChangeKind = Literal["removed", "price_changed", "quantity_changed"]


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Input (declared desired cart)
# =============================================================================


class CartLineInput(CamelModel):
    """One desired line; quantity <= 0 means "I no longer want this offer"."""

    offer_id: int
    quantity: int = Field(le=Limits.MAX_QUANTITY)
    comment: str | None = Field(default=None, max_length=Limits.MAX_COMMENT_LENGTH)
    allow_replacement: bool = True
    is_favorite: bool = False


class CartValidateRequest(CamelModel):
    """Full snapshot of the cart the client wants: not a delta."""

    delivery_slot: str | None = Field(default=None, max_length=Limits.MAX_DELIVERY_SLOT_LENGTH)
    items: list[CartLineInput] = Field(default_factory=list, max_length=Limits.MAX_CART_LINES)


# =============================================================================
# Canonical cart (cached verbatim)
# =============================================================================


class CanonicalCartLine(CamelModel):
    """A reconciled line: quantity is always positive."""

    offer_id: int
    name: str
    quantity: int = Field(gt=0)
    unit_price: int
    discount_price: int | None = None  # Final per-unit price after discount
    comment: str | None = None
    allow_replacement: bool = True
    is_favorite: bool = False


class CartTotals(CamelModel):
    """total == subtotal - discount_total."""

    subtotal: int = 0
    discount_total: int = 0
    total: int = 0


class CanonicalCart(CamelModel):
    """The single source of truth returned to clients and stored in the cache."""

    cart_token: str
    delivery_slot: str | None = None
    items: list[CanonicalCartLine] = Field(default_factory=list)
    totals: CartTotals = Field(default_factory=CartTotals)

    def quantities(self) -> dict[int, int]:
        """offer_id -> quantity for every line."""
        return {line.offer_id: line.quantity for line in self.items}

    def line_for(self, offer_id: int) -> CanonicalCartLine | None:
        return next((line for line in self.items if line.offer_id == offer_id), None)


# =============================================================================
# Output
# =============================================================================


class CartChange(CamelModel):
    """An automatic correction made to the declared cart. Never persisted."""

    type: CartChangeKind
    offer_id: int
    message: str


class CartValidateResponse(CanonicalCart):
    """Reconciled cart flattened together with the change log and stock snapshot."""

    changes: list[CartChange] = Field(default_factory=list)
    min_order_sum: int = 0
    is_min_order_reached: bool = True
    stock_by_offer_id: dict[int, int] = Field(default_factory=dict)
