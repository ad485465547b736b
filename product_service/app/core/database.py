import asyncio
import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..models.base import ProductServiceBase
from .setting import get_settings

logger = logging.getLogger("product_service.database")


def _mask_credentials(database_url: str) -> str:
    if "@" not in database_url:
        return database_url
    scheme, _, rest = database_url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


class ProductServiceDatabaseManager:
    """Custom database manager for Product Service with optimized settings."""

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 25,
        max_overflow: int = 5,
        pool_recycle: int = 300,
    ) -> None:
        engine_kwargs: Dict[str, Any] = {"echo": echo}

        if "sqlite" in database_url:
            # SQLite configuration for development and tests
            engine_kwargs["connect_args"] = {"timeout": 60, "check_same_thread": False}
        else:
            engine_kwargs.update(
                {
                    "pool_size": pool_size,
                    "max_overflow": max_overflow,
                    "pool_recycle": pool_recycle,
                    "pool_pre_ping": True,
                }
            )

        self.async_engine = create_async_engine(database_url, **engine_kwargs)
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "Product Service database manager initialized",
            extra={
                "operation": "database_manager_init",
                "database_url": _mask_credentials(database_url),
                "echo": echo,
            },
        )

    async def create_tables(self) -> None:
        """Create all Product Service database tables."""
        async with self.async_engine.begin() as conn:
            await conn.run_sync(ProductServiceBase.metadata.create_all, checkfirst=True)
        logger.info("Database tables created", extra={"operation": "create_tables"})

    async def ping(self, timeout: float = 2.0) -> bool:
        """Return True when the database answers ``SELECT 1`` within ``timeout`` seconds."""

        async def _select_one() -> None:
            async with self.async_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        try:
            await asyncio.wait_for(_select_one(), timeout=timeout)
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.warning(
                "Database ping failed",
                extra={"operation": "database_ping", "error": str(e)},
            )
            return False
        return True

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session for Product Service."""
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        """Properly close the Product Service database engine and connections."""
        await self.async_engine.dispose()
        logger.info(
            "Product Service database connections closed",
            extra={"operation": "database_close"},
        )


_database_manager: Optional[ProductServiceDatabaseManager] = None


def get_database_manager() -> ProductServiceDatabaseManager:
    """Lazily build the process-wide database manager from settings"""
    global _database_manager
    if _database_manager is None:
        settings = get_settings()
        _database_manager = ProductServiceDatabaseManager(
            database_url=settings.PRODUCT_DATABASE_URL,
            echo=settings.DEBUG,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_recycle=settings.DATABASE_POOL_RECYCLE,
        )
    return _database_manager


# Dependency injection function for FastAPI
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session for dependency injection."""
    async for session in get_database_manager().get_async_session():
        yield session
