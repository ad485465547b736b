"""
Unit tests for KafkaEventPublisher and queue declaration
"""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest
from aiokafka.errors import KafkaConnectionError, KafkaTimeoutError, TopicAlreadyExistsError

from product_service.app.events.base import EventPublishError, QueueDeclaration
from product_service.app.events.base.kafka_client import KafkaEventPublisher, declare_queue
from product_service.app.events.schemas import ProductEvent

KAFKA_CLIENT = "product_service.app.events.base.kafka_client"


@pytest.fixture
def queue():
    return QueueDeclaration(name="products.events")


@pytest.fixture
async def mock_producer():
    producer = Mock()
    producer.start = AsyncMock()
    producer.stop = AsyncMock()
    delivery = asyncio.get_running_loop().create_future()
    producer.send = AsyncMock(return_value=delivery)
    producer.delivery = delivery
    return producer


@pytest.fixture
async def connected_publisher(queue, mock_producer):
    with patch(f"{KAFKA_CLIENT}.AIOKafkaProducer", return_value=mock_producer), patch(
        f"{KAFKA_CLIENT}.declare_queue", new=AsyncMock()
    ):
        publisher = KafkaEventPublisher("localhost:9092", "product-service-producer", queue)
        await publisher.start(timeout=1.0)
    return publisher


class TestQueueDeclaration:
    def test_durable_queue_never_expires(self):
        assert QueueDeclaration(name="q").topic_config() == {"retention.ms": "-1"}

    def test_non_durable_queue_uses_broker_defaults(self):
        assert QueueDeclaration(name="q", durable=False).topic_config() == {}

    @pytest.mark.asyncio
    async def test_exclusive_queue_is_rejected(self):
        with pytest.raises(ValueError):
            await declare_queue("localhost:9092", QueueDeclaration(name="q", exclusive=True))

    @pytest.mark.asyncio
    async def test_existing_topic_is_not_recreated(self, queue):
        admin = Mock()
        admin.start = AsyncMock()
        admin.close = AsyncMock()
        admin.list_topics = AsyncMock(return_value={"products.events"})
        admin.create_topics = AsyncMock()

        with patch(f"{KAFKA_CLIENT}.AIOKafkaAdminClient", return_value=admin):
            await declare_queue("localhost:9092", queue)

        admin.create_topics.assert_not_called()
        admin.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_topic_is_created_with_durable_config(self, queue):
        admin = Mock()
        admin.start = AsyncMock()
        admin.close = AsyncMock()
        admin.list_topics = AsyncMock(return_value=set())
        admin.create_topics = AsyncMock()

        with patch(f"{KAFKA_CLIENT}.AIOKafkaAdminClient", return_value=admin):
            await declare_queue("localhost:9092", queue)

        (new_topics,), _ = admin.create_topics.call_args
        assert new_topics[0].name == "products.events"
        assert new_topics[0].topic_configs == {"retention.ms": "-1"}

    @pytest.mark.asyncio
    async def test_concurrent_creation_is_tolerated(self, queue):
        admin = Mock()
        admin.start = AsyncMock()
        admin.close = AsyncMock()
        admin.list_topics = AsyncMock(return_value=set())
        admin.create_topics = AsyncMock(side_effect=TopicAlreadyExistsError())

        with patch(f"{KAFKA_CLIENT}.AIOKafkaAdminClient", return_value=admin):
            await declare_queue("localhost:9092", queue)

        admin.close.assert_awaited_once()


class TestPublisherStartup:
    @pytest.mark.asyncio
    async def test_start_connects_and_declares_queue(self, queue, mock_producer):
        declare = AsyncMock()
        with patch(f"{KAFKA_CLIENT}.AIOKafkaProducer", return_value=mock_producer), patch(
            f"{KAFKA_CLIENT}.declare_queue", new=declare
        ):
            publisher = KafkaEventPublisher("localhost:9092", "client", queue)
            await publisher.start(timeout=1.0)

        assert publisher.is_connected
        declare.assert_awaited_once_with("localhost:9092", queue)

    @pytest.mark.asyncio
    async def test_unreachable_broker_leaves_publisher_degraded(self, queue, mock_producer):
        mock_producer.start = AsyncMock(side_effect=KafkaConnectionError())
        with patch(f"{KAFKA_CLIENT}.AIOKafkaProducer", return_value=mock_producer), patch(
            f"{KAFKA_CLIENT}.declare_queue", new=AsyncMock()
        ):
            publisher = KafkaEventPublisher(
                "localhost:9092", "client", queue, max_retries=2, retry_delay=0
            )
            await publisher.start(timeout=1.0)

        assert not publisher.is_connected
        assert mock_producer.start.await_count == 2
        assert mock_producer.stop.await_count == 2

    @pytest.mark.asyncio
    async def test_publish_while_degraded_raises(self, queue):
        publisher = KafkaEventPublisher("localhost:9092", "client", queue)

        with pytest.raises(EventPublishError):
            await publisher.publish(ProductEvent.deleted(1))


class TestPublish:
    @pytest.mark.asyncio
    async def test_publish_sends_json_body_to_queue_topic(
        self, connected_publisher, mock_producer
    ):
        event = ProductEvent.created(7, "Widget")

        await connected_publisher.publish(event)

        mock_producer.send.assert_awaited_once()
        args, kwargs = mock_producer.send.call_args
        assert args == ("products.events",)
        assert kwargs["value"] == event.to_message()
        assert ("content-type", b"application/json") in kwargs["headers"]

    @pytest.mark.asyncio
    async def test_publish_does_not_wait_for_broker_ack(self, connected_publisher, mock_producer):
        await connected_publisher.publish(ProductEvent.deleted(7))

        # the delivery future is still pending when publish returns
        assert not mock_producer.delivery.done()

    @pytest.mark.asyncio
    async def test_send_failure_raises_publish_error(self, connected_publisher, mock_producer):
        mock_producer.send = AsyncMock(side_effect=KafkaTimeoutError())

        with pytest.raises(EventPublishError):
            await connected_publisher.publish(ProductEvent.deleted(7))

    @pytest.mark.asyncio
    async def test_late_delivery_failure_is_logged_not_raised(
        self, connected_publisher, mock_producer, caplog
    ):
        await connected_publisher.publish(ProductEvent.deleted(7))

        mock_producer.delivery.set_exception(KafkaTimeoutError())
        await asyncio.sleep(0)

        assert any(
            record.getMessage() == "Kafka delivery failed after send" for record in caplog.records
        )

    @pytest.mark.asyncio
    async def test_stop_closes_producer(self, connected_publisher, mock_producer):
        await connected_publisher.stop()

        mock_producer.stop.assert_awaited_once()
        assert not connected_publisher.is_connected
        with pytest.raises(EventPublishError):
            await connected_publisher.publish(ProductEvent.deleted(7))


class TestEventManagement:
    @pytest.mark.asyncio
    async def test_init_events_installs_publisher_even_when_degraded(self, monkeypatch):
        from product_service.app.core import event_management
        from product_service.app.core.setting import ProductSettings

        settings = ProductSettings(
            _env_file=None,
            PRODUCT_DATABASE_URL="sqlite+aiosqlite:///x.db",
            KAFKA_BOOTSTRAP_SERVERS="kafka:9092",
            KAFKA_CONNECT_RETRIES=1,
        )
        start = AsyncMock()
        monkeypatch.setattr(KafkaEventPublisher, "start", start)

        publisher = await event_management.init_events(settings)
        try:
            assert event_management.get_event_publisher() is publisher
            assert publisher.client_id == "product-service-producer"
            assert publisher.queue == QueueDeclaration(name="products.events")
            start.assert_awaited_once_with(timeout=settings.KAFKA_CONNECT_TIMEOUT)
        finally:
            await event_management.close_events()

        assert event_management.get_event_publisher() is None
