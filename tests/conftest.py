"""
Pytest configuration and fixtures for storefront tests.
"""

import itertools
from decimal import Decimal

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from storefront.main import app
from storefront.models import Base, InventoryItem
from storefront.services.cart import CartCache, CartIdentity, get_cart_cache


# ID counter for SQLite BigInteger compatibility
# SQLite doesn't auto-increment BigInteger, so we need to manage IDs manually
_id_counter = itertools.count(1000)


# SQLite in-memory database for testing
# FOR UPDATE is compiled away on SQLite; transaction semantics remain
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Rate limits are exercised in production only
limiter.enabled = False


def next_id():
    """Generate a unique ID for test entities (SQLite BigInteger workaround)."""
    return next(_id_counter)


class FakeRedis:
    """
    Dict-backed stand-in for the redis-py client.

    Implements only get/set(ex=...), which is all the cart cache uses.
    Set fail_reads / fail_writes to simulate an outage.
    """

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def get(self, key):
        if self.fail_reads:
            raise redis.ConnectionError("redis is down")
        return self.store.get(key)

    def set(self, key, value, ex=None):
        if self.fail_writes:
            raise redis.ConnectionError("redis is down")
        self.store[key] = value
        self.ttls[key] = ex
        self.writes += 1
        return True


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cart_cache(fake_redis):
    """Cart cache backed by the in-memory fake client."""
    return CartCache(fake_redis)


@pytest.fixture
def identity():
    """An anonymous shopper."""
    return CartIdentity(cart_token="tok-anon-0001")


@pytest.fixture(scope="function")
def client(db_session, cart_cache):
    """
    Create a test client with database session and cart cache overrides.

    Not used as a context manager, so the lifespan (which talks to the
    real database) does not run.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cart_cache] = lambda: cart_cache

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def seed_item(db_session):
    """
    Factory creating an InventoryItem.

    Usage:
        apples = seed_item(name="Apples", unit_price=100, free_stock=10)
    """
    def _create(
        name: str = "Test Item",
        unit_price: int = 100,
        free_stock: int = 10,
        discount_percent=None,
        is_active: bool = True,
        is_available: bool = True,
        id: int | None = None,
    ) -> InventoryItem:
        item = InventoryItem(
            id=id if id is not None else next_id(),
            name=name,
            unit_price=unit_price,
            discount_percent=Decimal(str(discount_percent)) if discount_percent is not None else None,
            is_active=is_active,
            is_available=is_available,
            free_stock=free_stock,
        )
        db_session.add(item)
        db_session.commit()
        db_session.refresh(item)
        return item

    return _create
