"""Service test fixtures — async DB, seeded profiles, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session factory
    - app.state carries a RecordingSink instead of the real dispatcher, so route
      tests can assert which transitions were handed off

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the unique constraint,
      check constraints and ON CONFLICT upsert behave as on PostgreSQL
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.core.domain_types import UserId
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.infrastructure.edge_store import SqlEdgeStore
from app.infrastructure.profile_directory import SqlProfileDirectory
from app.infrastructure.realtime import RealtimeHub
from app.models.user_profile import UserProfile
from app.services.match_engine import MatchEngine
import app.infrastructure.database as db_module
from app.main import app

from tests.services.fakes import RecordingSink


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def make_user(test_db):
    """Insert a profile row and return its UserId."""
    async def _make(name: str = "Alice", photo_keys: list | None = None) -> UserId:
        user = UserProfile(
            id=uuid.uuid4(), name=name, age=27,
            photo_keys=photo_keys if photo_keys is not None else [f"photos/{name}.jpg"],
            location="Berlin",
        )
        test_db.add(user)
        await test_db.commit()
        return UserId(user.id)
    return _make


@pytest.fixture
async def alice(make_user):
    return await make_user("Alice")


@pytest.fixture
async def bob(make_user):
    return await make_user("Bob")


@pytest.fixture
def store(test_db):
    return SqlEdgeStore(test_db)


@pytest.fixture
def profiles(test_db):
    return SqlProfileDirectory(test_db)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def match_engine(store, profiles, sink):
    return MatchEngine(store, profiles, sink)


@pytest.fixture
async def client(test_engine, test_session_factory, sink):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    app.state.dispatcher = sink
    app.state.realtime = RealtimeHub()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
