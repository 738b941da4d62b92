"""Async SQLAlchemy engine and session management for gmscreen."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from sqlalchemy import Connection, inspect
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gmscreen.config import get_settings

from .models.base import Base

logger = structlog.get_logger(__name__)

# Global engine and session factory
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """
    Get or create the async SQLAlchemy engine from ``Settings.database_url``.

    Returns:
        The async database engine
    """
    global _engine

    if _engine is None:
        settings = get_settings()

        # Ensure data directory exists for file-backed SQLite
        if settings.database_url.startswith("sqlite") and ":memory:" not in settings.database_url:
            db_path = settings.database_url.split("///")[-1]
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        _engine = create_async_engine(settings.database_url, echo=settings.debug)
        logger.debug("database_engine_created", url=settings.database_url)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get or create the async session factory.

    Returns:
        The async session factory
    """
    global _async_session_factory

    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _async_session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager for database sessions.

    Commits on success and rolls back if the block raises.

    Example:
        async with get_session() as session:
            store = SqlCharacterStore(session)
            await store.add(character)
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _table_names(sync_conn: Connection) -> set[str]:
    return set(inspect(sync_conn).get_table_names())


async def init_db() -> list[str]:
    """
    Create the character, content and note tables that do not exist yet.

    Returns:
        Names of the tables created by this call (empty if all existed)
    """
    engine = get_engine()

    async with engine.begin() as conn:
        existing = await conn.run_sync(_table_names)
        await conn.run_sync(Base.metadata.create_all)

    created = [name for name in Base.metadata.tables if name not in existing]
    logger.info("database_initialized", created=created, tables=sorted(Base.metadata.tables))
    return created


async def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.debug("database_engine_disposed")
        _engine = None
        _async_session_factory = None
