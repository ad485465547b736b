"""
Notification Service messaging primitives.

A ``MessageSource`` hands out ``Delivery`` objects one at a time. Each
delivery is settled exactly once, with ``ack()`` or ``nack(requeue=...)``.
"""

from dataclasses import dataclass
from typing import Protocol


class ConsumerSetupError(Exception):
    """Initial consumption setup (connect, declare, subscribe) failed"""


class DeliveryChannelClosed(Exception):
    """The broker side closed the delivery channel"""


class AcknowledgementError(Exception):
    """Settling a delivery with the broker failed"""


@dataclass(frozen=True)
class QueueDeclaration:
    """Named queue parameters, declared identically by producers and consumers"""

    name: str
    durable: bool = True
    exclusive: bool = False
    auto_delete: bool = False

    def topic_config(self) -> dict[str, str]:
        if self.durable:
            return {"retention.ms": "-1"}
        return {}


class Delivery(Protocol):
    body: bytes
    topic: str
    partition: int
    offset: int

    async def ack(self) -> None: ...

    async def nack(self, requeue: bool = True) -> None: ...


class MessageSource(Protocol):
    async def start(self) -> None: ...

    async def receive(self) -> Delivery: ...

    async def stop(self) -> None: ...


__all__ = [
    "AcknowledgementError",
    "ConsumerSetupError",
    "Delivery",
    "DeliveryChannelClosed",
    "MessageSource",
    "QueueDeclaration",
]
