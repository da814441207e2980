"""
Pydantic schemas for the storefront API.
"""

from .cart import (
    CartChangeKind,
    CartLineInput,
    CartValidateRequest,
    CanonicalCartLine,
    CartTotals,
    CanonicalCart,
    CartChange,
    CartValidateResponse,
)

__all__ = [
    "CartChangeKind",
    "CartLineInput",
    "CartValidateRequest",
    "CanonicalCartLine",
    "CartTotals",
    "CanonicalCart",
    "CartChange",
    "CartValidateResponse",
]
