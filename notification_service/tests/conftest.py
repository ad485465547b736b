"""
Pytest configuration and fixtures for notification service tests.
"""

import asyncio
import os
from typing import List, Optional, Tuple

import pytest

# Required settings must be present before the application is imported
os.environ.setdefault("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")

from notification_service.app.events.base import AcknowledgementError, ConsumerSetupError, DeliveryChannelClosed

CHANNEL_CLOSED = object()


class FakeDelivery:
    """In-memory delivery; a requeueing nack hands it back to its source."""

    def __init__(self, source: "InMemoryMessageSource", body: bytes, offset: int):
        self.source = source
        self.body = body
        self.topic = "products.events"
        self.partition = 0
        self.offset = offset
        self.settlements: List[Tuple[str, Optional[bool]]] = []
        self.fail_ack = False

    async def ack(self) -> None:
        if self.fail_ack:
            raise AcknowledgementError("channel closed during ack")
        self.settlements.append(("ack", None))
        self.source.settled.set()

    async def nack(self, requeue: bool = True) -> None:
        self.settlements.append(("nack", requeue))
        if requeue:
            self.source.queue.put_nowait(self)
        self.source.settled.set()


class InMemoryMessageSource:
    """Queue-backed message source standing in for the broker."""

    def __init__(self):
        self.queue: asyncio.Queue = asyncio.Queue()
        self.settled = asyncio.Event()
        self.started = False
        self.stopped = False
        self.start_error: Optional[Exception] = None
        self.on_receive = None
        self._next_offset = 0

    def publish(self, body: bytes) -> FakeDelivery:
        delivery = FakeDelivery(self, body, self._next_offset)
        self._next_offset += 1
        self.queue.put_nowait(delivery)
        return delivery

    def close_channel(self) -> None:
        self.queue.put_nowait(CHANNEL_CLOSED)

    async def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    async def receive(self) -> FakeDelivery:
        item = await self.queue.get()
        if item is CHANNEL_CLOSED:
            raise DeliveryChannelClosed("channel closed by broker")
        if self.on_receive is not None:
            self.on_receive()
        return item

    async def stop(self) -> None:
        self.stopped = True

    async def wait_settled(self, timeout: float = 1.0) -> None:
        await asyncio.wait_for(self.settled.wait(), timeout=timeout)
        self.settled.clear()


@pytest.fixture
def message_source() -> InMemoryMessageSource:
    return InMemoryMessageSource()


@pytest.fixture
def failing_message_source() -> InMemoryMessageSource:
    source = InMemoryMessageSource()
    source.start_error = ConsumerSetupError("consume queue 'products.events': broker unreachable")
    return source
