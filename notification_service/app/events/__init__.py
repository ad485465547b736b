"""
Events module for the Notification Service.

Consuming side of the product event flow:

    - ProductEvent: decoded view of a product event body
    - KafkaMessageSource: manual-ack source bound to the durable
      ``products.events`` queue
    - ProductEventConsumer: logs each event, acks on success and requeues
      on failure
"""

from .base import (
    AcknowledgementError,
    ConsumerSetupError,
    Delivery,
    DeliveryChannelClosed,
    MessageSource,
    QueueDeclaration,
)
from .base.kafka_client import KafkaDelivery, KafkaMessageSource, declare_queue
from .consumers import ProductEventConsumer
from .schemas import EventDecodeError, ProductEvent, ProductEventType

__all__ = [
    "AcknowledgementError",
    "ConsumerSetupError",
    "Delivery",
    "DeliveryChannelClosed",
    "EventDecodeError",
    "KafkaDelivery",
    "KafkaMessageSource",
    "MessageSource",
    "ProductEvent",
    "ProductEventConsumer",
    "ProductEventType",
    "QueueDeclaration",
    "declare_queue",
]
