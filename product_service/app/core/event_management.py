"""
Product Service Event Management
Initializes and manages Kafka event publishing for the product service.
"""

import logging
from typing import Optional

from ..events.base import QueueDeclaration
from ..events.base.kafka_client import KafkaEventPublisher
from .setting import ProductSettings, get_settings

logger = logging.getLogger("product_service.events")

# Global instances
_kafka_publisher: Optional[KafkaEventPublisher] = None


async def init_events(settings: Optional[ProductSettings] = None) -> KafkaEventPublisher:
    """Initialize event publishing infrastructure.

    The publisher is always installed, even when the broker cannot be reached;
    in that case it runs degraded and every publish reports a failure.
    """
    global _kafka_publisher

    settings = settings or get_settings()

    logger.info(
        "Initializing event publishing infrastructure",
        extra={
            "operation": "init_events",
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "topic_name": settings.KAFKA_TOPIC_PRODUCT_EVENTS,
        },
    )

    _kafka_publisher = KafkaEventPublisher(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        client_id=f"{settings.SERVICE_NAME}-producer",
        queue=QueueDeclaration(name=settings.KAFKA_TOPIC_PRODUCT_EVENTS),
        max_retries=settings.KAFKA_CONNECT_RETRIES,
    )
    await _kafka_publisher.start(timeout=settings.KAFKA_CONNECT_TIMEOUT)

    if not _kafka_publisher.is_connected:
        logger.warning(
            "Event publishing operating in degraded mode",
            extra={"operation": "init_events", "degraded_mode": True},
        )

    return _kafka_publisher


async def close_events() -> None:
    """Close event publishing infrastructure"""
    global _kafka_publisher

    try:
        if _kafka_publisher:
            await _kafka_publisher.stop()
            logger.info(
                "Event publishing infrastructure closed",
                extra={"operation": "close_events"},
            )
    finally:
        _kafka_publisher = None


def get_event_publisher() -> Optional[KafkaEventPublisher]:
    """Get the product event publisher instance"""
    return _kafka_publisher
