"""
ProductRepository tests against a real SQLite database
"""

import pytest

from product_service.app.core.database import ProductServiceDatabaseManager, _mask_credentials
from product_service.app.core.exceptions import ProductNotFoundError
from product_service.app.repository.product_repository import ProductRepository


class TestProductRepository:
    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamp(self, db_session):
        repository = ProductRepository(db_session)

        product = await repository.create("Widget")

        assert product.id is not None and product.id > 0
        assert product.name == "Widget"
        assert product.created_at is not None

    @pytest.mark.asyncio
    async def test_list_is_newest_first_and_paginated(self, db_session):
        repository = ProductRepository(db_session)
        for name in ("first", "second", "third"):
            await repository.create(name)

        first_page = await repository.list(limit=2, offset=0)
        second_page = await repository.list(limit=2, offset=2)

        assert [p.name for p in first_page] == ["third", "second"]
        assert [p.name for p in second_page] == ["first"]
        assert await repository.count() == 3

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, db_session):
        repository = ProductRepository(db_session)
        product = await repository.create("Widget")

        await repository.delete(product.id)

        assert await repository.count() == 0
        assert await repository.list(limit=10, offset=0) == []

    @pytest.mark.asyncio
    async def test_delete_missing_row_raises_not_found(self, db_session):
        repository = ProductRepository(db_session)

        with pytest.raises(ProductNotFoundError):
            await repository.delete(999)

    @pytest.mark.asyncio
    async def test_count_on_empty_table(self, db_session):
        assert await ProductRepository(db_session).count() == 0


class TestProductServiceDatabaseManager:
    @pytest.mark.asyncio
    async def test_ping_succeeds_on_reachable_database(self, database_manager):
        assert await database_manager.ping(timeout=2.0) is True

    @pytest.mark.asyncio
    async def test_ping_fails_on_unreachable_database(self, tmp_path):
        manager = ProductServiceDatabaseManager(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nested' / 'db.sqlite'}"
        )
        try:
            assert await manager.ping(timeout=2.0) is False
        finally:
            await manager.close()

    def test_credentials_are_masked(self):
        masked = _mask_credentials("postgresql+asyncpg://user:secret@db:5432/products")

        assert masked == "postgresql+asyncpg://***@db:5432/products"
        assert "secret" not in masked
