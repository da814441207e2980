"""
Services module for business logic.

- cart/: cart identity, pricing math, cache adapter, reader and
  reconciliation engine

Usage:
    from storefront.services.cart import CartReconciliationService
    service = CartReconciliationService(db, cache)
"""
