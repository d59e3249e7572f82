"""FastAPI dependencies for storage and probing."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from observatory.domain.services.probe_runner import ProbeRunner
from observatory.persistence.database import get_db, get_session_factory
from observatory.settings import settings

__all__ = ["get_db", "get_probe_runner", "get_sessionmaker"]


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Session factory for handlers that open several independent sessions.

    Raises:
        ConfigurationError: If no database URL is configured
    """
    return get_session_factory()


def get_probe_runner() -> ProbeRunner:
    """Probe runner over the configured service targets."""
    return ProbeRunner(
        settings.monitored_services,
        timeout_seconds=settings.probe_timeout_seconds,
        max_concurrency=settings.probe_max_concurrency or None,
        user_agent=settings.probe_user_agent,
    )
