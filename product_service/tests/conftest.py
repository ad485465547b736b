"""
Pytest configuration and fixtures for product service tests.
"""

import os
from datetime import datetime, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

# Required settings must be present before the application is imported
os.environ.setdefault("PRODUCT_DATABASE_URL", "sqlite+aiosqlite:///./test_products.db")
os.environ.setdefault("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")

from product_service.app.api.dependencies import get_db_manager, get_product_service
from product_service.app.core.database import ProductServiceDatabaseManager
from product_service.app.core.exceptions import ProductNotFoundError
from product_service.app.core.metrics import ProductMetrics
from product_service.app.events.base import EventPublishError
from product_service.app.events.schemas import ProductEvent
from product_service.app.main import app
from product_service.app.models.product import Product
from product_service.app.services.product_service import ProductService


class InMemoryProductStore:
    """Dict-backed product store with sequential ids."""

    def __init__(self):
        self.products: Dict[int, Product] = {}
        self.next_id = 1
        self.fail_with: Optional[Exception] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, name: str) -> Product:
        self._check()
        product = Product(id=self.next_id, name=name, created_at=datetime.now(timezone.utc))
        self.products[product.id] = product
        self.next_id += 1
        return product

    async def delete(self, product_id: int) -> None:
        self._check()
        if self.products.pop(product_id, None) is None:
            raise ProductNotFoundError(product_id)

    async def list(self, limit: int, offset: int) -> List[Product]:
        self._check()
        newest_first = sorted(self.products.values(), key=lambda p: p.id, reverse=True)
        return newest_first[offset : offset + limit]

    async def count(self) -> int:
        self._check()
        return len(self.products)


class RecordingPublisher:
    """Publisher double that records events, or fails every publish."""

    def __init__(self, fail: bool = False):
        self.events: List[ProductEvent] = []
        self.fail = fail

    async def publish(self, event: ProductEvent) -> None:
        if self.fail:
            raise EventPublishError("broker unavailable")
        self.events.append(event)


@pytest.fixture
def product_store() -> InMemoryProductStore:
    return InMemoryProductStore()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def metrics() -> ProductMetrics:
    """Counters on a private registry so tests never share state."""
    return ProductMetrics.build(CollectorRegistry())


@pytest.fixture
def product_service(product_store, publisher, metrics) -> ProductService:
    return ProductService(product_store, publisher, metrics)


@pytest.fixture
def db_manager_mock():
    manager = Mock(spec=ProductServiceDatabaseManager)
    manager.ping = AsyncMock(return_value=True)
    return manager


@pytest.fixture
def client(product_service, db_manager_mock):
    """Test client with the service and database manager overridden.

    Used without a ``with`` block, so the lifespan (database and broker
    startup) never runs.
    """
    app.dependency_overrides[get_product_service] = lambda: product_service
    app.dependency_overrides[get_db_manager] = lambda: db_manager_mock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def database_manager(tmp_path):
    """File-backed SQLite database with the schema created."""
    manager = ProductServiceDatabaseManager(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'products.db'}"
    )
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
async def db_session(database_manager):
    async with database_manager.async_session_maker() as session:
        yield session
