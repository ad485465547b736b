from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import ProductServiceBaseModel


class Product(ProductServiceBaseModel):
    __tablename__ = "products"

    # id and created_at are inherited from ProductServiceBaseModel
    name: Mapped[str] = mapped_column(String(255), nullable=False)
