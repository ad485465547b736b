from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    name: str = Field(..., description="Product name; surrounding whitespace is trimmed")


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int


class ProductListResponse(BaseModel):
    items: List[ProductResponse]
    pagination: PaginationMeta
