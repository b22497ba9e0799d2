"""
Pytest configuration and fixtures for the divination API tests.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

# Set test environment before the settings object is built
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from app.core.cache import cache_manager  # noqa: E402
from app.core.middleware import request_metrics  # noqa: E402
from app.data.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite so every session sees the same tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def test_db(session_factory):
    async with session_factory() as db:
        yield db


@pytest.fixture
async def client(session_factory):
    """HTTP client bound to the app with the database swapped for the test one."""

    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    cache_manager.clear()
    request_metrics.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
    cache_manager.clear()


@pytest.fixture
def register_user(client):
    """Post a registration, defaulting to alice@mail.com with password secret123."""

    async def register(username="alice", email="alice@mail.com", password="secret123", **extra):
        payload = {"username": username, "email": email, "password": password, **extra}
        return await client.post("/api/auth/register", json=payload)

    return register


@pytest.fixture
async def auth_headers(register_user):
    response = await register_user()
    assert response.status_code == 201
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}
