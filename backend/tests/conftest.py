"""Shared pytest fixtures for the IoT control API test suite.

Provides:
- In-memory async SQLite database, one per test (StaticPool, single connection)
- FastAPI app with get_db overridden to use that database
- HTTP test client (httpx.AsyncClient over ASGITransport)
- User factory returning a user and a bearer token for a given role
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Override settings BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-jwt-secret-not-for-production-0123456789abcdef"
os.environ["ENVIRONMENT"] = "testing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_ROLE_SOURCE"] = "database"
os.environ["WEATHER_API_KEY"] = ""
os.environ["LOG_FORMAT"] = "text"

from db.base import Base  # noqa: E402
from core.security import create_access_token  # noqa: E402

DEFAULT_PASSWORD = "TestPassword123!"


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory database for every test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )
    # Import all models so Base.metadata knows about them
    import db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for service-level tests. Not shared with HTTP requests."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# App / HTTP client fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app(session_factory):
    """FastAPI app whose get_db yields sessions on the test database."""
    from app.dependencies import get_db
    from app.main import create_app

    test_app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    test_app.dependency_overrides[get_db] = override_get_db
    yield test_app
    test_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Test data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(session_factory):
    """Factory: create and commit a user, return (user, auth headers)."""
    from services.auth_service import AuthService

    counter = {"n": 0}

    async def _make_user(role="viewer", username=None, password=DEFAULT_PASSWORD, is_active=True):
        counter["n"] += 1
        username = username or f"{role or 'norole'}-{counter['n']}"
        async with session_factory() as session:
            user = await AuthService(session).register(
                username=username,
                password=password,
                email=f"{username}@example.com",
                role=role,
            )
            # an explicit None on insert falls back to the column default
            user.role = role
            user.is_active = is_active
            await session.commit()

        token = create_access_token(user_id=user.id, username=user.username, role=user.role)
        return user, {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("admin")


@pytest_asyncio.fixture
async def editor(make_user):
    return await make_user("editor")


@pytest_asyncio.fixture
async def operator(make_user):
    return await make_user("operator")


@pytest_asyncio.fixture
async def viewer(make_user):
    return await make_user("viewer")
