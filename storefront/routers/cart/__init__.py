"""
Cart routers - /api/cart/*
"""

from .routes import router
from .identity import resolve_cart_identity

__all__ = ["router", "resolve_cart_identity"]
