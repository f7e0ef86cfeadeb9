"""Shared test fixtures.

Every test gets its own SQLite database file (aiosqlite) with the schema
created and the course/trophy catalogue seeded. Redis is disabled; tests
that care about pub/sub pass a mock.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from techpath.auth.dependencies import get_or_create_user
from techpath.auth.jwt import create_access_token
from techpath.config import get_settings
from techpath.database import close_db, create_schema, get_session_factory, init_db
from techpath.db.models import User
from techpath.progress.seed import seed_catalogue


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    """Point settings at a per-test SQLite file; no Redis, no real gateway."""
    monkeypatch.setenv("TECHPATH_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'techpath.db'}")
    monkeypatch.setenv("TECHPATH_REDIS_URL", "")
    monkeypatch.setenv("TECHPATH_LOG_FORMAT", "console")
    monkeypatch.setenv("TECHPATH_JWT_SECRET", "test-secret")
    monkeypatch.setenv("TECHPATH_ACTIVITY_TIMEZONE", "UTC")
    monkeypatch.setenv("TECHPATH_ADVICE_API_URL", "https://advice.test/v1/chat/completions")
    monkeypatch.setenv("TECHPATH_ADVICE_API_KEY", "test-key")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session(test_settings) -> AsyncGenerator[AsyncSession, None]:
    """A session on a fresh, seeded database."""
    await init_db(test_settings.database_url)
    await create_schema()
    async with get_session_factory()() as session:
        await seed_catalogue(session)
        yield session
    await close_db()


@pytest_asyncio.fixture
async def other_session(db_session) -> AsyncGenerator[AsyncSession, None]:
    """A second, independent session on the same database (a concurrent request)."""
    async with get_session_factory()() as session:
        yield session


async def make_user(db: AsyncSession, user_id: str, full_name: str | None = None) -> User:
    user = await get_or_create_user(db, user_id, f"{user_id}@example.com")
    if full_name:
        user.full_name = full_name
        await db.commit()
    return user


@pytest_asyncio.fixture
async def alice(db_session) -> User:
    return await make_user(db_session, "user-alice", "Alice")


@pytest_asyncio.fixture
async def bob(db_session) -> User:
    return await make_user(db_session, "user-bob", "Bob")


@pytest_asyncio.fixture
async def carol(db_session) -> User:
    return await make_user(db_session, "user-carol", "Carol")


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def app(test_settings) -> FastAPI:
    from techpath.main import create_app

    return create_app()


@pytest_asyncio.fixture
async def client(app: FastAPI, db_session) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, sharing the test database."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, alice: User) -> AsyncClient:
    """Client authenticated as Alice."""
    client.headers.update(auth_headers(alice.id))
    return client


@pytest.fixture
def headers_for():
    """Build Authorization headers for any user id."""
    return auth_headers
