"""Product service for business logic"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from ..core.exceptions import InvalidProductNameError
from ..core.metrics import ProductMetrics, get_product_metrics
from ..events.base import EventPublishError
from ..events.schemas import ProductEvent, ProductEventType
from ..models.product import Product

logger = logging.getLogger("product_service.service")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class ProductStore(Protocol):
    """Persist-and-retrieve capability"""

    async def create(self, name: str) -> Product: ...

    async def delete(self, product_id: int) -> None: ...

    async def list(self, limit: int, offset: int) -> Sequence[Product]: ...

    async def count(self) -> int: ...


class EventPublisher(Protocol):
    """Publish-event capability"""

    async def publish(self, event: ProductEvent) -> None: ...


@dataclass
class ProductPage:
    items: List[Product]
    total: int
    page: int
    limit: int


def normalize_pagination(page: int, limit: int) -> tuple[int, int]:
    if page < 1:
        page = 1
    if limit < 1:
        limit = DEFAULT_PAGE_SIZE
    if limit > MAX_PAGE_SIZE:
        limit = MAX_PAGE_SIZE
    return page, limit


class ProductService:
    """
    Product mutations followed by a best-effort event publish.

    The publish is attempted exactly once per successful mutation. A publish
    failure is logged and never rolls back, retries, or fails the mutation.
    """

    def __init__(
        self,
        store: ProductStore,
        publisher: EventPublisher,
        metrics: Optional[ProductMetrics] = None,
    ):
        self.store = store
        self.publisher = publisher
        self.metrics = metrics or get_product_metrics()

    async def create_product(self, name: str) -> Product:
        name = name.strip()
        if not name:
            raise InvalidProductNameError()

        product = await self.store.create(name)
        logger.info(
            "Product created",
            extra={"product_id": product.id, "operation": "create_product"},
        )

        await self._publish(ProductEventType.PRODUCT_CREATED, product.id, product.name)

        self.metrics.created.inc()
        return product

    async def delete_product(self, product_id: int) -> None:
        await self.store.delete(product_id)
        logger.info(
            "Product deleted",
            extra={"product_id": product_id, "operation": "delete_product"},
        )

        await self._publish(ProductEventType.PRODUCT_DELETED, product_id)

        self.metrics.deleted.inc()

    async def list_products(self, page: int, limit: int) -> ProductPage:
        page, limit = normalize_pagination(page, limit)
        offset = (page - 1) * limit

        items = await self.store.list(limit, offset)
        total = await self.store.count()

        return ProductPage(items=list(items), total=total, page=page, limit=limit)

    async def _publish(
        self, event_type: ProductEventType, product_id: int, name: Optional[str] = None
    ) -> None:
        # an event that fails validation is a publish failure like any other
        try:
            if event_type is ProductEventType.PRODUCT_CREATED:
                event = ProductEvent.created(product_id, name)
            else:
                event = ProductEvent.deleted(product_id)
            await self.publisher.publish(event)
        except (EventPublishError, ValueError) as e:
            logger.error(
                f"publish {event_type.value} event failed",
                extra={
                    "product_id": product_id,
                    "error": str(e),
                    "operation": "publish_event",
                },
            )
