"""Async database engine and session factory.

The database is optional: when no URL is configured the application runs
without persistence and ``Database`` is never constructed.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class Database:
    """Owns one engine and its session factory for the process lifetime."""

    def __init__(self, url: str):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, future=True)
        self.session_maker = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        # Import registers the models on Base.metadata
        from app.models import inspection_log  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("[DB] Connected and initialized inspection_logs")

    async def dispose(self) -> None:
        await self.engine.dispose()
