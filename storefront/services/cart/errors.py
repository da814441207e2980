"""
Cart domain errors.

Raised by the cart services and translated to HTTP responses by the
router. Domain adjustments (removed items, clamped quantities, price
changes) are never errors: they are reported as CartChange entries.
"""


class CartError(Exception):
    """Base class for cart failures."""
    pass


class CartCacheUnavailableError(CartError):
    """The cart cache could not be read or written."""

    def __init__(self, operation: str, identity_key: str):
        self.operation = operation
        self.identity_key = identity_key
        super().__init__(f"Cart cache {operation} failed for {identity_key}")


class InventoryUnavailableError(CartError):
    """The inventory transaction failed and was rolled back."""

    def __init__(self, identity_key: str):
        self.identity_key = identity_key
        super().__init__(f"Inventory transaction failed for {identity_key}")


class CartPersistError(CartError):
    """
    Stock was committed but the reconciled cart could not be cached.

    The inventory ledger is correct; the cached cart is stale until the
    next successful reconciliation for this identity.
    """

    def __init__(self, identity_key: str, stock_by_offer_id: dict[int, int]):
        self.identity_key = identity_key
        self.stock_by_offer_id = stock_by_offer_id
        super().__init__(f"Cart for {identity_key} committed but not cached")


class CartCacheCorruptError(CartError):
    """
    A cached cart exists but no longer decodes.

    Not a miss: the entry is the only record of what the cart holds, so it
    must not be replaced by an empty cart or reconciled from zero.
    """

    def __init__(self, identity_key: str):
        self.identity_key = identity_key
        super().__init__(f"Cached cart for {identity_key} could not be decoded")
