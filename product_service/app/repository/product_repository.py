"""Product repository for database operations"""

from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ProductNotFoundError
from ..models.product import Product


class ProductRepository:
    """Repository for product database operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, name: str) -> Product:
        """Insert a product and return it with its generated id and timestamp"""
        product = Product(name=name)
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def delete(self, product_id: int) -> None:
        """Hard delete; raises ProductNotFoundError when no row matched"""
        result = await self.db.execute(delete(Product).where(Product.id == product_id))
        await self.db.commit()
        if result.rowcount == 0:
            raise ProductNotFoundError(product_id)

    async def list(self, limit: int, offset: int) -> List[Product]:
        query = select(Product).order_by(Product.id.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Product))
        return int(result.scalar_one())
