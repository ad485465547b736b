"""
Notification Service Worker
===========================

Main entry point for the Notification Service. Consumes product events from
the durable ``products.events`` queue and writes one structured log line per
event until SIGINT or SIGTERM arrives.
"""

import asyncio
import signal
import sys
import time
from typing import Optional

from .core.settings import NotificationServiceSettings, get_settings
from .events import ConsumerSetupError, KafkaMessageSource, ProductEventConsumer, QueueDeclaration
from .utils.logging import setup_notification_logging


def build_consumer(settings: NotificationServiceSettings) -> ProductEventConsumer:
    source = KafkaMessageSource(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        group_id=settings.KAFKA_GROUP_ID,
        client_id=settings.SERVICE_NAME,
        queue=QueueDeclaration(name=settings.KAFKA_TOPIC_PRODUCT_EVENTS),
    )
    return ProductEventConsumer(source)


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))


async def run(
    settings: Optional[NotificationServiceSettings] = None,
    consumer: Optional[ProductEventConsumer] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> int:
    """Run the worker until stopped. Returns the process exit code."""
    settings = settings or get_settings()
    enable_file_logging = settings.ENVIRONMENT.lower() in ["production", "staging"]
    logger = setup_notification_logging(
        "notification_service",
        log_level=settings.LOG_LEVEL,
        enable_file_logging=enable_file_logging,
    )

    consumer = consumer or build_consumer(settings)
    if stop_event is None:
        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)

    logger.info(
        "Starting notification service",
        extra={
            "environment": settings.ENVIRONMENT,
            "topic_name": settings.KAFKA_TOPIC_PRODUCT_EVENTS,
            "group_id": settings.KAFKA_GROUP_ID,
        },
    )

    consume_task = asyncio.ensure_future(consumer.listen(stop_event))
    stop_task = asyncio.ensure_future(stop_event.wait())
    exit_code = 0
    try:
        await asyncio.wait({consume_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

        if not consume_task.done():
            shutdown_start = time.time()
            logger.info(
                "Shutdown signal received, draining consumer",
                extra={"shutdown_timeout_s": settings.SHUTDOWN_TIMEOUT},
            )
            done, _ = await asyncio.wait({consume_task}, timeout=settings.SHUTDOWN_TIMEOUT)
            if not done:
                logger.warning(
                    "Consumer did not stop within shutdown timeout",
                    extra={"shutdown_timeout_s": settings.SHUTDOWN_TIMEOUT},
                )
                consume_task.cancel()
                await asyncio.gather(consume_task, return_exceptions=True)
            else:
                logger.info(
                    "Consumer drained",
                    extra={"shutdown_duration_ms": int((time.time() - shutdown_start) * 1000)},
                )

        if not consume_task.cancelled() and consume_task.exception() is not None:
            raise consume_task.exception()  # type: ignore[misc]
    except ConsumerSetupError as e:
        logger.error(
            "Failed to start product event consumer",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        exit_code = 1
    except Exception as e:
        logger.error(
            "Notification service stopped with an error",
            exc_info=True,
            extra={"error_type": type(e).__name__},
        )
        exit_code = 1
    finally:
        stop_task.cancel()
        await consumer.close()

    logger.info("Notification service stopped", extra={"exit_code": exit_code})
    return exit_code


def main() -> None:
    """Console entry point"""
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
