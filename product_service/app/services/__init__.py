"""Service layer for Product Service"""

from .product_service import EventPublisher, ProductPage, ProductService, ProductStore

__all__ = [
    "ProductService",
    "ProductStore",
    "EventPublisher",
    "ProductPage",
]
