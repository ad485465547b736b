import asyncio
import logging
from functools import partial
from typing import Optional

from aiokafka import AIOKafkaProducer  # type: ignore
from aiokafka.admin import AIOKafkaAdminClient, NewTopic  # type: ignore
from aiokafka.errors import KafkaError, TopicAlreadyExistsError  # type: ignore

from ..schemas import CONTENT_TYPE_JSON, ProductEvent
from . import EventPublishError, QueueDeclaration

logger = logging.getLogger("product_service.events.kafka")


async def declare_queue(bootstrap_servers: str, queue: QueueDeclaration) -> None:
    """Create the queue topic if it does not exist yet. Safe to call repeatedly."""
    if queue.exclusive or queue.auto_delete:
        raise ValueError("exclusive and auto-delete queues are not supported")

    admin_client = AIOKafkaAdminClient(bootstrap_servers=bootstrap_servers)
    await admin_client.start()  # type: ignore
    try:
        topics = await admin_client.list_topics()
        if queue.name in topics:
            return
        try:
            await admin_client.create_topics(
                [
                    NewTopic(
                        name=queue.name,
                        num_partitions=1,
                        replication_factor=1,
                        topic_configs=queue.topic_config(),
                    )
                ]
            )
        except TopicAlreadyExistsError:
            return
        logger.info(
            "Declared queue topic",
            extra={"topic_name": queue.name, "operation": "declare_queue"},
        )
    finally:
        await admin_client.close()  # type: ignore


class KafkaEventPublisher:
    """
    Fire-and-forget product event publisher.

    ``publish`` hands the serialized event to the producer and returns as soon
    as the send call does; it never waits for the broker acknowledgment and
    never retries. Any failure is raised as ``EventPublishError``.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        queue: QueueDeclaration,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.queue = queue
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.producer: Optional[AIOKafkaProducer] = None
        self.is_connected = False
        self._connection_lock = asyncio.Lock()

    async def start(self, timeout: float = 10.0) -> None:
        """Connect and declare the queue; stays in degraded mode if the broker is unreachable"""
        async with self._connection_lock:
            if self.producer and self.is_connected:
                return

            for attempt in range(self.max_retries):
                producer = AIOKafkaProducer(
                    bootstrap_servers=self.bootstrap_servers,
                    client_id=self.client_id,
                    request_timeout_ms=int(timeout * 1000),
                )
                try:
                    logger.info(
                        "Attempting Kafka connection",
                        extra={
                            "attempt": attempt + 1,
                            "max_retries": self.max_retries,
                            "operation": "kafka_connect",
                        },
                    )
                    await asyncio.wait_for(producer.start(), timeout=timeout)  # type: ignore
                    await asyncio.wait_for(
                        declare_queue(self.bootstrap_servers, self.queue), timeout=timeout
                    )
                except (KafkaError, OSError, asyncio.TimeoutError) as e:
                    await producer.stop()  # type: ignore
                    logger.warning(
                        f"Kafka connection attempt {attempt + 1} failed: {e}",
                        extra={"operation": "kafka_connect", "error": str(e)},
                    )
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(self.retry_delay)
                    continue

                self.producer = producer
                self.is_connected = True
                logger.info(
                    "Successfully connected to Kafka",
                    extra={"topic_name": self.queue.name, "operation": "kafka_connect"},
                )
                return

            logger.error(
                f"Failed to connect to Kafka after {self.max_retries} attempts. "
                "Running in degraded mode (events will not be published)"
            )
            self.is_connected = False

    async def stop(self) -> None:
        """Stop Kafka producer"""
        async with self._connection_lock:
            if self.producer:
                try:
                    await self.producer.stop()  # type: ignore
                    logger.info("Kafka producer stopped")
                except KafkaError as e:
                    logger.warning(
                        "Error stopping Kafka producer",
                        extra={"error": str(e), "operation": "stop_producer"},
                    )
                finally:
                    self.producer = None
                    self.is_connected = False

    async def publish(self, event: ProductEvent) -> None:
        """Send one event to the queue without waiting for delivery confirmation"""
        if not self.is_connected or self.producer is None:
            raise EventPublishError("Kafka producer not connected")

        try:
            payload = event.to_message()
        except (TypeError, ValueError) as e:
            raise EventPublishError(f"serialize event: {e}") from e

        try:
            delivery = await self.producer.send(  # type: ignore
                self.queue.name,
                value=payload,
                headers=[("content-type", CONTENT_TYPE_JSON.encode("utf-8"))],
            )
        except (KafkaError, OSError) as e:
            raise EventPublishError(f"publish to {self.queue.name!r}: {e}") from e

        delivery.add_done_callback(partial(self._on_delivery, event))
        logger.debug(
            "Handed event to Kafka producer",
            extra={
                "event_type": event.event_type.value,
                "product_id": event.product_id,
                "topic": self.queue.name,
                "operation": "publish_event",
            },
        )

    def _on_delivery(self, event: ProductEvent, future: "asyncio.Future") -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.warning(
                "Kafka delivery failed after send",
                extra={
                    "event_type": event.event_type.value,
                    "product_id": event.product_id,
                    "topic": self.queue.name,
                    "error": str(exc),
                    "operation": "publish_event_delivery",
                },
            )
