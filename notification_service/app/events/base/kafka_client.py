import asyncio
import logging
from typing import Optional

from aiokafka import AIOKafkaConsumer, TopicPartition  # type: ignore
from aiokafka.admin import AIOKafkaAdminClient, NewTopic  # type: ignore
from aiokafka.errors import ConsumerStoppedError, KafkaError, TopicAlreadyExistsError  # type: ignore
from aiokafka.structs import ConsumerRecord  # type: ignore

from . import AcknowledgementError, ConsumerSetupError, DeliveryChannelClosed, QueueDeclaration

logger = logging.getLogger("notification_service.events.kafka")


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


class KafkaDelivery:
    """
    One record under manual acknowledgment.

    ``ack`` commits the offset right after this record. ``nack(requeue=True)``
    seeks the partition back to this record so the next receive returns it
    again; ``nack(requeue=False)`` commits past it.
    """

    def __init__(self, consumer: AIOKafkaConsumer, record: ConsumerRecord):
        self._consumer = consumer
        self.body: bytes = record.value or b""
        self.topic: str = record.topic
        self.partition: int = record.partition
        self.offset: int = record.offset

    @property
    def _topic_partition(self) -> TopicPartition:
        return TopicPartition(self.topic, self.partition)

    async def ack(self) -> None:
        try:
            await self._consumer.commit({self._topic_partition: self.offset + 1})  # type: ignore
        except KafkaError as e:
            raise AcknowledgementError(
                f"ack {self.topic}[{self.partition}]@{self.offset}: {e}"
            ) from e

    async def nack(self, requeue: bool = True) -> None:
        if not requeue:
            await self.ack()
            return
        try:
            self._consumer.seek(self._topic_partition, self.offset)
        except KafkaError as e:
            raise AcknowledgementError(
                f"requeue {self.topic}[{self.partition}]@{self.offset}: {e}"
            ) from e


class KafkaMessageSource:
    """Manual-ack consumer of a single queue topic within a consumer group"""

    def __init__(
        self,
        bootstrap_servers: str,
        group_id: str,
        client_id: str,
        queue: QueueDeclaration,
        timeout: float = 30.0,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.group_id = group_id
        self.client_id = client_id
        self.queue = queue
        self.timeout = timeout
        self.consumer: Optional[AIOKafkaConsumer] = None

    async def start(self) -> None:
        """Declare the queue and subscribe; raises ConsumerSetupError on failure"""
        if self.consumer is not None:
            return

        consumer = AIOKafkaConsumer(
            self.queue.name,
            bootstrap_servers=self.bootstrap_servers,
            group_id=self.group_id,
            client_id=self.client_id,
            enable_auto_commit=False,
            auto_offset_reset="earliest",
        )
        try:
            await asyncio.wait_for(
                declare_queue(self.bootstrap_servers, self.queue), timeout=self.timeout
            )
            await asyncio.wait_for(consumer.start(), timeout=self.timeout)  # type: ignore
        except (KafkaError, OSError, ValueError, asyncio.TimeoutError) as e:
            await consumer.stop()  # type: ignore
            raise ConsumerSetupError(f"consume queue {self.queue.name!r}: {e}") from e

        self.consumer = consumer
        logger.info(
            "Subscribed to queue topic",
            extra={
                "topic_name": self.queue.name,
                "group_id": self.group_id,
                "operation": "subscribe",
            },
        )

    async def receive(self) -> KafkaDelivery:
        """Wait for the next record"""
        if self.consumer is None:
            raise DeliveryChannelClosed("consumer is not running")
        try:
            record = await self.consumer.getone()  # type: ignore
        except ConsumerStoppedError as e:
            raise DeliveryChannelClosed("consumer stopped") from e
        return KafkaDelivery(self.consumer, record)

    async def stop(self) -> None:
        if self.consumer is None:
            return
        try:
            await self.consumer.stop()  # type: ignore
            logger.info(
                "Stopped Kafka consumer",
                extra={"topic_name": self.queue.name, "operation": "stop_consumer"},
            )
        except KafkaError as e:
            logger.warning(
                "Error stopping Kafka consumer",
                extra={
                    "topic_name": self.queue.name,
                    "error": str(e),
                    "operation": "stop_consumer_error",
                },
            )
        finally:
            self.consumer = None
