"""
Async SQLAlchemy engine and session factory.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config.settings import Settings
from database.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and session factory for one process."""

    def __init__(self, settings: Settings) -> None:
        engine_kwargs: Dict[str, Any] = {"echo": settings.db_echo}
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=settings.db_pool_recycle,
            )

        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_tables(self) -> None:
        """Create missing tables.  Existing tables are left untouched."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready")

    async def dispose(self) -> None:
        await self.engine.dispose()
