"""
Cart Router.
Reads and reconciles the shopper's canonical cart.
Identity comes from the cart token cookie and an optional bearer token.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.config.logging import cart_logger as logger, mask_identity_key
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.exceptions import ExternalServiceError, InternalError
from storefront.schemas.cart import CanonicalCart, CartValidateRequest, CartValidateResponse
from storefront.services.cart import (
    CartCache,
    CartCacheCorruptError,
    CartCacheUnavailableError,
    CartIdentity,
    CartPersistError,
    CartReader,
    CartReconciliationService,
    InventoryUnavailableError,
    get_cart_cache,
)
from .identity import resolve_cart_identity


router = APIRouter(prefix="/api/cart", tags=["cart"])

# Seconds a client should wait before retrying after a collaborator outage
RETRY_AFTER_SECONDS = 5


@router.get("", response_model=CanonicalCart)
@limiter.limit("60/minute")
def get_cart(
    request: Request,
    identity: CartIdentity = Depends(resolve_cart_identity),
    cache: CartCache = Depends(get_cart_cache),
) -> CanonicalCart:
    """
    Get the shopper's cached canonical cart.

    Creates (and caches) an empty cart on first access. Does not
    re-validate against inventory: that only happens on /validate.
    """
    return CartReader(cache).get_or_create_cart(identity)


@router.post("/validate", response_model=CartValidateResponse)
@limiter.limit("30/minute")
def validate_cart(
    request: Request,
    body: CartValidateRequest,
    identity: CartIdentity = Depends(resolve_cart_identity),
    db: Session = Depends(get_db),
    cache: CartCache = Depends(get_cart_cache),
) -> CartValidateResponse:
    """
    Reconcile the declared cart against inventory.

    The body is the full desired cart, not a delta: offers left out are
    removed and their reserved stock is released. Corrections made to the
    declaration are returned in `changes`.

    A failure never returns a cart: the client should retry rather than
    assume the cart is now empty.
    """
    service = CartReconciliationService(db, cache)

    try:
        result = service.validate_and_persist_cart(identity, body)
    except CartCacheUnavailableError as e:
        raise ExternalServiceError(
            "cart cache",
            is_unavailable=True,
            retry_after=RETRY_AFTER_SECONDS,
            identity_key=mask_identity_key(e.identity_key),
        )
    except CartCacheCorruptError as e:
        # Retrying will not help until the entry is repaired or expires
        raise ExternalServiceError(
            "cart cache",
            is_unavailable=True,
            identity_key=mask_identity_key(e.identity_key),
            reason="undecodable cached cart",
        )
    except InventoryUnavailableError as e:
        raise ExternalServiceError(
            "inventory",
            is_unavailable=True,
            retry_after=RETRY_AFTER_SECONDS,
            identity_key=mask_identity_key(e.identity_key),
        )
    except CartPersistError as e:
        raise InternalError(
            "Cart could not be saved - please try again",
            identity_key=mask_identity_key(e.identity_key),
        )

    if result.changes:
        logger.info(
            "Declared cart corrected",
            identity_key=mask_identity_key(identity.cache_key),
            changes=[change.type for change in result.changes],
        )

    return CartValidateResponse(
        **result.cart.model_dump(),
        changes=result.changes,
        min_order_sum=result.min_order_sum,
        is_min_order_reached=result.is_min_order_reached,
        stock_by_offer_id=result.stock_by_offer_id,
    )
