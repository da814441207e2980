"""
Canonical cart math.

Pure functions over whole currency units: no I/O, no locks. Everything
here is recomputed from the inventory rows on every reconciliation.
"""

from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP

from storefront.schemas.cart import CanonicalCart, CanonicalCartLine, CartTotals

_HUNDRED = Decimal(100)
_WHOLE_UNIT = Decimal(1)


def discount_price(unit_price: int, discount_percent: Decimal | float | int | None) -> int | None:
    """
    Final per-unit price after discount, or None when there is no discount.

    Rounded half-up to the nearest whole currency unit:
    discount_price(200, 25) == 150, discount_price(99, 50) == 50.
    """
    if discount_percent is None:
        return None
    percent = Decimal(str(discount_percent))
    if percent <= 0:
        return None
    value = Decimal(unit_price) * (_HUNDRED - percent) / _HUNDRED
    return int(value.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP))


def final_price(unit_price: int, discounted: int | None) -> int:
    """Price actually charged per unit."""
    return discounted if discounted is not None else unit_price


def line_final_price(line: CanonicalCartLine) -> int:
    return final_price(line.unit_price, line.discount_price)


def build_line(
    *,
    offer_id: int,
    name: str,
    quantity: int,
    unit_price: int,
    discount_percent: Decimal | float | int | None,
    comment: str | None = None,
    allow_replacement: bool = True,
    is_favorite: bool = False,
) -> CanonicalCartLine:
    """Build a canonical line with its discount price resolved."""
    return CanonicalCartLine(
        offer_id=offer_id,
        name=name,
        quantity=quantity,
        unit_price=unit_price,
        discount_price=discount_price(unit_price, discount_percent),
        comment=comment,
        allow_replacement=allow_replacement,
        is_favorite=is_favorite,
    )


def calculate_totals(lines: Iterable[CanonicalCartLine]) -> CartTotals:
    """
    Sum per-line contributions.

    subtotal       = sum(unit_price * qty)
    discount_total = sum((unit_price - final_price) * qty)
    total          = subtotal - discount_total
    """
    subtotal = 0
    discount_total = 0
    for line in lines:
        subtotal += line.unit_price * line.quantity
        discount_total += (line.unit_price - line_final_price(line)) * line.quantity
    return CartTotals(
        subtotal=subtotal,
        discount_total=discount_total,
        total=subtotal - discount_total,
    )


def build_cart(
    cart_token: str,
    delivery_slot: str | None,
    lines: list[CanonicalCartLine],
) -> CanonicalCart:
    return CanonicalCart(
        cart_token=cart_token,
        delivery_slot=delivery_slot,
        items=lines,
        totals=calculate_totals(lines),
    )


def empty_cart(cart_token: str) -> CanonicalCart:
    """A valid, cacheable cart with no items and all totals zero."""
    return build_cart(cart_token, None, [])
