"""
Shared test fixtures for the Buffet Manager test suite.

Each test gets its own in-memory SQLite database (aiosqlite + StaticPool)
and an httpx AsyncClient wired to the app with ``get_db`` overridden.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from buffet.api.deps import get_db
from buffet.core.config import settings
from buffet.db.base import Base
from buffet.main import app

COOKIE = settings.SESSION_COOKIE_NAME
MANAGER_EMAIL = "m@x.com"
MANAGER_PASSWORD = "password1"
EMPLOYEE_EMAIL = "e@x.com"
EMPLOYEE_PASSWORD = "password2"


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test; tables created up front."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Helpers ─────────────────────────────────────────────────────────
def use_session(client: AsyncClient, token: str | None) -> None:
    """Make *token* the only session cookie the client sends."""
    client.cookies.clear()
    if token is not None:
        client.cookies.set(COOKIE, token)


async def register_manager(
    client: AsyncClient, email: str = MANAGER_EMAIL, password: str = MANAGER_PASSWORD
) -> str:
    resp = await client.post(
        "/register",
        data={"email": email, "password": password, "confirm_password": password},
    )
    assert resp.status_code == 303, resp.text
    token = resp.cookies[COOKIE]
    use_session(client, token)
    return token


async def sign_in(client: AsyncClient, email: str, password: str) -> str:
    resp = await client.post("/login", data={"email": email, "password": password})
    assert resp.status_code == 303, resp.text
    token = resp.cookies[COOKIE]
    use_session(client, token)
    return token


@pytest.fixture
async def manager_token(async_client: AsyncClient) -> str:
    """A registered manager, signed in on ``async_client``."""
    return await register_manager(async_client)


@pytest.fixture
async def employee(async_client: AsyncClient, manager_token: str) -> dict:
    """An employee of the default manager; the client stays signed in as manager."""
    resp = await async_client.post(
        "/employees", json={"email": EMPLOYEE_EMAIL, "password": EMPLOYEE_PASSWORD}
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
