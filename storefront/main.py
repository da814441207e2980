"""
REST API main application.
Entry point for the FastAPI storefront server.
"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler
from storefront.core import configure_cors, lifespan
from storefront.routers.cart import router as cart_router
from storefront.routers.public import health_router


app = FastAPI(
    title="Storefront API",
    description="Cart reconciliation against the inventory ledger",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Middlewares
configure_cors(app)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(cart_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
