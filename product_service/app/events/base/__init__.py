"""
Product Service messaging primitives: queue declaration and publish errors.
"""

from dataclasses import dataclass


class EventPublishError(Exception):
    """Single failure signal for a publish that did not reach the broker.

    Covers both serialization and transport failures; callers treat it as
    non-fatal.
    """


@dataclass(frozen=True)
class QueueDeclaration:
    """Named queue parameters, declared identically by producers and consumers"""

    name: str
    durable: bool = True
    exclusive: bool = False
    auto_delete: bool = False

    def topic_config(self) -> dict[str, str]:
        # durable: retained until consumed, never expired by time
        if self.durable:
            return {"retention.ms": "-1"}
        return {}


__all__ = ["EventPublishError", "QueueDeclaration"]
