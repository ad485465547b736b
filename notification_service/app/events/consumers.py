"""
Notification Service product event consumer.

Drains the product events queue one message at a time. Each message moves
through ``Received -> Processing -> {Acknowledged | Requeued}``: a body that
decodes into a ``ProductEvent`` is logged and acknowledged, any processing
failure is logged and negatively acknowledged with requeue.

There is no redelivery limit and no dead-letter target, so a body that can
never be decoded keeps coming back.
"""

import asyncio
import logging
from typing import Optional

from .base import AcknowledgementError, ConsumerSetupError, Delivery, DeliveryChannelClosed, MessageSource
from .schemas import ProductEvent

logger = logging.getLogger("notification_service.events.consumer")


class ProductEventConsumer:
    """Sequential, manually acknowledged consumer of product events"""

    def __init__(self, source: MessageSource, event_logger: Optional[logging.Logger] = None):
        self.source = source
        self.event_logger = event_logger or logger

    async def listen(self, stop_event: asyncio.Event) -> None:
        """Consume until ``stop_event`` is set or the delivery channel closes.

        Raises ConsumerSetupError when consumption cannot be started.
        """
        try:
            await self.source.start()
        except ConsumerSetupError:
            raise
        except Exception as e:
            raise ConsumerSetupError(str(e)) from e

        while True:
            delivery = await self._next_delivery(stop_event)
            if delivery is None:
                return
            await self.process(delivery)

    async def _next_delivery(self, stop_event: asyncio.Event) -> Optional[Delivery]:
        """Race the next delivery against the stop signal; None means stop."""
        if stop_event.is_set():
            return None

        receive_task = asyncio.ensure_future(self.source.receive())
        stop_task = asyncio.ensure_future(stop_event.wait())
        try:
            done, _ = await asyncio.wait(
                {receive_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            receive_task.cancel()
            stop_task.cancel()
            raise

        if stop_task in done:
            await self._abandon_receive(receive_task)
            logger.info("Stop signal received, leaving consume loop")
            return None

        stop_task.cancel()
        try:
            return receive_task.result()
        except DeliveryChannelClosed as e:
            logger.info(
                "Delivery channel closed, leaving consume loop",
                extra={"reason": str(e)},
            )
            return None

    async def _abandon_receive(self, receive_task: "asyncio.Future[Delivery]") -> None:
        if not receive_task.done():
            receive_task.cancel()
            try:
                await receive_task
            except (asyncio.CancelledError, DeliveryChannelClosed):
                pass
            return

        # The delivery arrived together with the stop signal: hand it back unprocessed.
        if receive_task.cancelled() or receive_task.exception() is not None:
            return
        await self._settle(receive_task.result(), acknowledge=False)

    async def process(self, delivery: Delivery) -> bool:
        """Handle one delivery and settle it. Returns True when it was acknowledged."""
        try:
            self.handle_message(delivery.body)
        except Exception as e:
            logger.error(
                "Failed to process product event",
                extra={
                    "error": str(e),
                    "topic": delivery.topic,
                    "partition": delivery.partition,
                    "offset": delivery.offset,
                },
            )
            await self._settle(delivery, acknowledge=False)
            return False

        return await self._settle(delivery, acknowledge=True)

    def handle_message(self, body: bytes) -> ProductEvent:
        event = ProductEvent.from_message(body)
        self.event_logger.info(
            "Product notification event",
            extra={"event": event.to_payload()},
        )
        return event

    async def _settle(self, delivery: Delivery, acknowledge: bool) -> bool:
        try:
            if acknowledge:
                await delivery.ack()
            else:
                await delivery.nack(requeue=True)
        except AcknowledgementError as e:
            logger.error(
                "Failed to settle delivery",
                extra={
                    "error": str(e),
                    "acknowledge": acknowledge,
                    "topic": delivery.topic,
                    "partition": delivery.partition,
                    "offset": delivery.offset,
                },
            )
            return False
        return acknowledge

    async def close(self) -> None:
        await self.source.stop()
