"""Pytest configuration and fixtures."""

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from observatory.persistence.database import Base
from observatory.persistence.models import *  # noqa: F401, F403
from observatory.settings import ServiceTarget

TEST_TARGETS = [
    ServiceTarget(name="web", url="https://web.example.test/", service_type="website"),
    ServiceTarget(name="db", url="https://db.example.test/rest/v1/", service_type="database"),
    ServiceTarget(name="api", url="https://api.example.test/status", service_type="api"),
]


@pytest.fixture
async def engine(tmp_path):
    """Create a test database engine.

    File-backed SQLite so that concurrent sessions see the same data.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'observatory.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


def ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200)


@pytest.fixture
def probe_handler():
    """HTTP handler used by the probe runner in API tests; override per test."""
    return ok_handler


@pytest.fixture
async def client(db_session, session_factory, probe_handler):
    """Create a test client for the FastAPI app."""
    from observatory.api.deps import get_db, get_probe_runner, get_sessionmaker
    from observatory.domain.services.probe_runner import ProbeRunner
    from observatory.main import app

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_sessionmaker] = lambda: session_factory
    app.dependency_overrides[get_probe_runner] = lambda: ProbeRunner(
        TEST_TARGETS,
        timeout_seconds=1.0,
        transport=httpx.MockTransport(probe_handler),
    )

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()
