"""
Database Connection Module
Handles the SQLAlchemy async engine and session factory.

PostgreSQL (psycopg) is the default target; sqlite+aiosqlite URLs work for
local runs and tests. The engine and session factory are built per
application by the app factory and stored on ``app.state``.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from restaurant_api.core.config import Settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    Pool sizing only applies to server databases; SQLite manages its own
    connections.
    """
    kwargs = {"echo": settings.database_echo}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=5,  # Connection pool size
            max_overflow=10,  # Extra connections when pool is full
            pool_pre_ping=True,
        )
    return create_async_engine(settings.database_url, **kwargs)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory - creates new database sessions."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False  # Objects remain accessible after commit
    )


def get_session_maker(request: Request) -> async_sessionmaker[AsyncSession]:
    """Dependency returning the application's session factory."""
    return request.app.state.session_maker


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with request.app.state.session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(engine: AsyncEngine) -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register every mapped class on Base.metadata
    from restaurant_api import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
