"""
Redis Connection Pool Management.

The cart cache is read and written from synchronous request handlers,
so a single thread-safe sync pool backs every client handed out here.
"""

from __future__ import annotations

import threading

import redis

from shared.config.settings import settings, REDIS_URL
from shared.config.logging import get_logger

logger = get_logger(__name__)


_redis_sync_pool: redis.ConnectionPool | None = None
_sync_pool_lock = threading.Lock()


def _get_redis_sync_pool() -> redis.ConnectionPool:
    """
    Get or create the synchronous Redis connection pool.

    Uses a connection pool instead of a single client so concurrent
    request threads do not serialize on one socket.
    """
    global _redis_sync_pool
    if _redis_sync_pool is None:
        with _sync_pool_lock:
            if _redis_sync_pool is None:
                _redis_sync_pool = redis.ConnectionPool.from_url(
                    REDIS_URL,
                    max_connections=settings.redis_sync_pool_max_connections,
                    decode_responses=True,
                    socket_connect_timeout=settings.redis_socket_timeout,
                    socket_timeout=settings.redis_socket_timeout,
                    health_check_interval=30,  # Auto-detect dead connections
                )
                logger.info(
                    "Redis sync pool initialized",
                    max_connections=settings.redis_sync_pool_max_connections,
                    timeout=settings.redis_socket_timeout,
                )
    return _redis_sync_pool


def get_redis_sync_client() -> redis.Redis:
    """
    Get a Redis client from the sync connection pool.

    Each call returns a client backed by the shared pool, allowing
    multiple concurrent operations without blocking each other.
    """
    return redis.Redis(connection_pool=_get_redis_sync_pool())


def close_redis_sync_pool() -> None:
    """
    Close the sync Redis connection pool on application shutdown.

    Holds the pool lock so a concurrent get_redis_sync_client() never
    sees a half-closed pool.
    """
    global _redis_sync_pool
    with _sync_pool_lock:
        if _redis_sync_pool is not None:
            try:
                _redis_sync_pool.disconnect()
                logger.info("Redis sync pool closed")
            except redis.RedisError as e:
                logger.warning("Error closing Redis sync pool", error=str(e))
            finally:
                _redis_sync_pool = None
