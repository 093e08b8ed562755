"""
Database engine and session management.

The module-level engine points at the configured database. Tests and jobs
can build their own engine (e.g. in-memory SQLite) with the same helpers.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from vehiclebuilder.config import settings
from vehiclebuilder.models.db import Base


def build_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create an async engine, defaulting to the configured database."""
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.debug if echo is None else echo,
        pool_pre_ping=True,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Loaded rows stay readable after commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine()
async_session_factory = build_session_factory(engine)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """
    Session that commits when the block succeeds.

    Usage:
        async with session_scope() as session:
            await save_catalog(session, cards)
    """
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables. Safe to call on an existing database."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """
    Drop all tables.

    WARNING: Destroys all data. Use only for testing.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
