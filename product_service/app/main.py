"""
Product Service FastAPI Application
==================================

Main application entry point for the Product Service microservice.
Handles product creation, deletion and listing, and publishes a product
event after every successful mutation.
"""

import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from .api.v1.health import router as health_router
from .api.v1.products import router as products_router
from .core.database import get_database_manager
from .core.event_management import close_events, init_events
from .core.setting import get_settings
from .middleware.error import setup_product_error_handling
from .middleware.logging import RequestContextMiddleware
from .utils.logging import setup_product_logging

settings = get_settings()
enable_file_logging = settings.ENVIRONMENT.lower() in ["production", "staging"]

logger = setup_product_logging(
    "product_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=enable_file_logging,
)


# Lifespan management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup and shutdown."""
    startup_start = time.time()

    try:
        await _initialize_services(startup_start)
    except Exception as e:
        logger.error(
            "Failed to start product service",
            exc_info=True,
            extra={
                "startup_duration_ms": int((time.time() - startup_start) * 1000),
                "error_type": type(e).__name__,
            },
        )
        raise

    yield

    await _shutdown_services()


async def _initialize_services(startup_start: float) -> None:
    """Initialize database (required) and event publisher (degradable)."""
    logger.info(
        "Starting product service initialization",
        extra={
            "environment": settings.ENVIRONMENT,
            "debug_mode": settings.DEBUG,
            "service_version": settings.APP_VERSION,
        },
    )

    db_start = time.time()
    await get_database_manager().create_tables()
    db_duration = int((time.time() - db_start) * 1000)

    event_start = time.time()
    publisher = await init_events(settings)
    event_duration = int((time.time() - event_start) * 1000)

    logger.info(
        "Product service started successfully",
        extra={
            "total_startup_duration_ms": int((time.time() - startup_start) * 1000),
            "database_init_ms": db_duration,
            "event_publisher_init_ms": event_duration,
            "event_publisher_connected": publisher.is_connected,
        },
    )


async def _shutdown_services() -> None:
    """Shutdown all application services gracefully."""
    shutdown_start = time.time()
    logger.info("Starting product service shutdown")

    try:
        await close_events()
    finally:
        await get_database_manager().close()

    logger.info(
        "Product service shutdown completed",
        extra={"shutdown_duration_ms": int((time.time() - shutdown_start) * 1000)},
    )


# Application factory
def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
    )

    app.add_middleware(RequestContextMiddleware)
    setup_product_error_handling(app)
    _setup_routers(app)

    return app


def _setup_routers(app: FastAPI) -> None:
    """Configure all application routers."""
    routers_info: list[dict[str, Any]] = []

    app.include_router(health_router, tags=["Health"])
    routers_info.append({"router": "health", "prefix": "", "tags": ["Health"]})

    app.include_router(products_router, tags=["Products"])
    routers_info.append({"router": "products", "prefix": "/products", "tags": ["Products"]})

    logger.info(
        "API routes configured",
        extra={"total_routers": len(routers_info), "routers": routers_info},
    )


app = create_app()


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        app,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        timeout_graceful_shutdown=int(settings.SHUTDOWN_TIMEOUT),
        log_config=None,
    )


if __name__ == "__main__":
    run()
