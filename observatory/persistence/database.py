"""Database connection and session management."""

import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from observatory.core.errors import ConfigurationError
from observatory.settings import get_async_database_url, settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory, creating the engine on first use.

    Raises:
        ConfigurationError: If no database URL is configured
    """
    global _engine, _session_factory

    if not settings.is_backend_configured:
        raise ConfigurationError()

    if _session_factory is None:
        _engine = create_async_engine(
            get_async_database_url(),
            echo=False,
            pool_pre_ping=True,
        )
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database engine created")
    return _session_factory


async def dispose_engine() -> None:
    """Dispose of the engine's connection pool, if one was created."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency for getting database session."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield session
