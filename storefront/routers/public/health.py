"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its dependencies.
"""

import redis
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from shared.infrastructure.redis import get_redis_sync_client


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "storefront",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check():
    """
    Detailed health check that verifies connectivity to dependencies.
    Returns status of the inventory store (PostgreSQL) and the cart cache (Redis).

    Returns 503 Service Unavailable if any dependency is down.
    """
    checks = {
        "service": "storefront",
        "environment": settings.environment,
        "dependencies": {},
    }
    all_healthy = True

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        checks["dependencies"]["postgresql"] = {"status": "healthy"}
    except SQLAlchemyError as e:
        checks["dependencies"]["postgresql"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False

    try:
        get_redis_sync_client().ping()
        checks["dependencies"]["redis"] = {"status": "healthy"}
    except redis.RedisError as e:
        checks["dependencies"]["redis"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False

    checks["status"] = "healthy" if all_healthy else "degraded"

    if not all_healthy:
        return JSONResponse(content=checks, status_code=503)

    return checks
