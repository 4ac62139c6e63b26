"""
Shared fixtures.

The service runs against an in-memory SQLite database, Celery in eager mode
and an in-memory lock service, so no postgres/redis/broker is needed.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from bookcart.data.database import Base, SessionLocal, engine
from bookcart.data.models.product import ProductModel
from bookcart.services.lock_service import CartLockService


class InMemoryLockService(CartLockService):
    """Same hold() semantics as the redis-backed service, keys kept in a dict."""

    def __init__(self):
        self.ttl = 10
        self.held = {}
        self.acquired = []

    def acquire_cart_lock(self, owner_key: str, token: str) -> bool:
        if owner_key in self.held:
            return False
        self.held[owner_key] = token
        self.acquired.append(owner_key)
        return True

    def release_cart_lock(self, owner_key: str, token: str) -> bool:
        if self.held.get(owner_key) != token:
            return False
        del self.held[owner_key]
        return True


PRODUCTS = [
    {"id": 1, "name": "Fluent Python", "author": "Luciano Ramalho", "price": Decimal("100.00"), "image": "🐍", "stock": 7},
    {"id": 2, "name": "Clean Code", "author": "Robert C. Martin", "price": Decimal("50.00"), "image": "🧹", "stock": 3},
    {"id": 3, "name": "SICP", "author": "Abelson, Sussman", "price": Decimal("10.00"), "stock": 1},
    {"id": 4, "name": "Pamphlet", "author": "Anonymous", "price": Decimal("5.00"), "stock": 0},
    {"id": 5, "name": "Misprinted", "author": "Unknown", "price": Decimal("-3.00"), "stock": 2},
    {"id": 6, "name": "Withdrawn", "author": "Unknown", "price": Decimal("20.00"), "stock": 0, "is_active": False},
    {"id": 7, "name": "Odd Cents", "author": "Unknown", "price": Decimal("10.01"), "stock": 9},
]


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    import bookcart.data.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(database):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def products(db_session):
    db_session.add_all(ProductModel(**p) for p in PRODUCTS)
    db_session.commit()
    return {p["id"]: p for p in PRODUCTS}


@pytest.fixture
def lock_service():
    return InMemoryLockService()


@pytest.fixture
def test_client(products, lock_service):
    """
    TestClient with the redis lock service swapped for the in-memory one.
    Lifespan is not entered; the `database` fixture owns the schema.
    """
    from bookcart.main import app
    from bookcart.api.routers.carts import get_lock_service

    app.dependency_overrides[get_lock_service] = lambda: lock_service

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
