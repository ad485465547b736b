"""Product API endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from ...core.exceptions import InvalidProductNameError, ProductNotFoundError
from ...schemas.product import (
    PaginationMeta,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
)
from ...services.product_service import DEFAULT_PAGE_SIZE, ProductService
from ..dependencies import ProductServiceDep, RequestIdDep

logger = logging.getLogger("product_service.api")
router = APIRouter(prefix="/products")

DEFAULT_PAGE = 1


def parse_query_int(raw: Optional[str], fallback: int) -> int:
    """Lenient positive-int parsing; anything unusable falls back to the default"""
    if raw is None or raw == "":
        return fallback
    try:
        value = int(raw)
    except ValueError:
        return fallback
    if value < 1:
        return fallback
    return value


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    request_id: Optional[str] = RequestIdDep,
    service: ProductService = ProductServiceDep,
):
    """Create a new product"""
    try:
        product = await service.create_product(product_data.name)
    except InvalidProductNameError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to create product: {str(e)}",
            extra={"request_id": request_id, "error": str(e)},
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="failed to create product",
        )

    return ProductResponse.model_validate(product)


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: Optional[str] = Query(None, description="Page number"),
    limit: Optional[str] = Query(None, description="Items per page"),
    request_id: Optional[str] = RequestIdDep,
    service: ProductService = ProductServiceDep,
):
    """List products, newest first"""
    try:
        result = await service.list_products(
            parse_query_int(page, DEFAULT_PAGE),
            parse_query_int(limit, DEFAULT_PAGE_SIZE),
        )
    except Exception as e:
        logger.error(
            f"Failed to list products: {str(e)}",
            extra={"request_id": request_id, "error": str(e)},
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="failed to get products",
        )

    return ProductListResponse(
        items=[ProductResponse.model_validate(item) for item in result.items],
        pagination=PaginationMeta(page=result.page, limit=result.limit, total=result.total),
    )


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    request_id: Optional[str] = RequestIdDep,
    service: ProductService = ProductServiceDep,
):
    """Delete a product by id"""
    try:
        parsed_id = int(product_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="invalid product id"
        )

    try:
        await service.delete_product(parsed_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to delete product {parsed_id}: {str(e)}",
            extra={"product_id": parsed_id, "request_id": request_id, "error": str(e)},
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="failed to delete product",
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
