"""
Events module for the Product Service.

Publishing side of the product event flow:

    - ProductEvent: immutable wire contract (product_created, product_deleted)
    - KafkaEventPublisher: fire-and-forget publisher onto the durable
      ``products.events`` queue
    - EventPublishError: the single failure signal a publish can raise
"""

from .base import EventPublishError, QueueDeclaration
from .base.kafka_client import KafkaEventPublisher, declare_queue
from .schemas import ProductEvent, ProductEventType

__all__ = [
    "EventPublishError",
    "KafkaEventPublisher",
    "ProductEvent",
    "ProductEventType",
    "QueueDeclaration",
    "declare_queue",
]
