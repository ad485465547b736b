"""
FastAPI dependency injection for Product Service

Provides database sessions, the event publisher and the ProductService
built on top of them.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import ProductServiceDatabaseManager, get_database_manager, get_db_session
from ..core.event_management import get_event_publisher
from ..repository.product_repository import ProductRepository
from ..services.product_service import EventPublisher, ProductService

# =====================================================
# DATABASE DEPENDENCIES
# =====================================================


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""
    async for session in get_db_session():
        yield session


def get_db_manager() -> ProductServiceDatabaseManager:
    return get_database_manager()


# =====================================================
# EVENT PUBLISHER DEPENDENCIES
# =====================================================


def get_product_event_publisher() -> EventPublisher:
    """Provide the event publisher installed at startup"""
    publisher = get_event_publisher()
    if publisher is None:
        raise RuntimeError("Event publisher not initialized")
    return publisher


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_product_service(
    session: AsyncSession = Depends(get_async_session),
    publisher: EventPublisher = Depends(get_product_event_publisher),
) -> ProductService:
    """Provide ProductService instance with database and event publishing"""
    return ProductService(ProductRepository(session), publisher)


# =====================================================
# REQUEST CONTEXT DEPENDENCIES
# =====================================================


def get_request_id(request: Request) -> Optional[str]:
    """Request id assigned by RequestContextMiddleware"""
    return getattr(request.state, "request_id", None)


# =====================================================
# COMMON DEPENDENCY ALIASES
# =====================================================

RequestIdDep = Depends(get_request_id)
ProductServiceDep = Depends(get_product_service)
DatabaseManagerDep = Depends(get_db_manager)
