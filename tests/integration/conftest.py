"""Pytest fixtures for API-level tests.

Runs against TEST_DATABASE_URL when it is set (PYTEST_ALLOW_DB=1 must confirm
the database is safe to mutate); otherwise a fresh in-memory SQLite database
is created for every test.
"""

import os
from datetime import date
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from dotenv import load_dotenv

from app.models.season_status import SeasonStatus
from app.schemas.events import Event
from app.schemas.seasons import Season
from app.services.media_storage import MediaStorage

load_dotenv()

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


def _load_database_url() -> str:
    """Resolve the database URL for tests, enforcing an explicit opt-in."""
    test_db_url = os.getenv("TEST_DATABASE_URL")
    if not test_db_url:
        return SQLITE_URL
    if int(os.getenv("PYTEST_ALLOW_DB", "0")) != 1:
        raise RuntimeError(
            "Running integration tests against TEST_DATABASE_URL requires setting"
            " PYTEST_ALLOW_DB=1 to confirm the configured database is safe to mutate."
        )
    return test_db_url


@pytest.fixture(scope="session")
def database_url() -> str:
    return _load_database_url()


@pytest_asyncio.fixture()
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Yield an engine with a freshly created schema."""
    from app.utils.db_async import import_table_modules

    import_table_modules()

    if database_url.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory database
        engine = create_async_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(database_url, echo=False, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)
        await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture()
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting rows; call commit() after seeding."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def media_storage(tmp_path) -> MediaStorage:
    """Local-filesystem storage rooted in the test's temp directory."""
    return MediaStorage(use_local=True, local_dir=str(tmp_path))


@pytest_asyncio.fixture()
async def app_client(
    session_factory: async_sessionmaker[AsyncSession],
    media_storage: MediaStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an HTTP client with the application wired to the test database."""
    try:
        from app.main import app
    except ValidationError as exc:  # pragma: no cover - guard for misconfigured env
        pytest.skip(f"App configuration failed: {exc}")

    from app.services.media_storage import get_media_storage
    from app.utils.db_async import get_session

    async def _get_session_override() -> AsyncGenerator[AsyncSession, None]:
        # Routes open their own transactions, so each request gets a new session
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override
    app.dependency_overrides[get_media_storage] = lambda: media_storage
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_session, None)
        app.dependency_overrides.pop(get_media_storage, None)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Ensure HTTPX uses asyncio backend during tests."""
    return "asyncio"


def make_event(name: str = "Miss Nepal", **overrides: Any) -> Event:
    return Event(name=name, **overrides)


def make_season(event_id: int, year: int = 2025, **overrides: Any) -> Season:
    """Build a stored upcoming season row; override any column."""
    values: dict[str, Any] = {
        "event_id": event_id,
        "year": year,
        "status": SeasonStatus.UPCOMING,
        "slug": f"miss-nepal-{year}",
        "start_date": date(year, 3, 1),
        "end_date": date(year, 6, 1),
        "audition_form_deadline": date(year, 2, 1),
        "voting_end_date": date(year, 5, 30),
        "price_per_vote": 10,
        "notice": [],
        "image": f"seasons/{year}.png",
        "gallery": [],
        "timeline": [],
    }
    values.update(overrides)
    return Season(**values)


@pytest_asyncio.fixture()
async def event(db_session: AsyncSession) -> Event:
    """A stored event named 'Miss Nepal'."""
    event = make_event()
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event
