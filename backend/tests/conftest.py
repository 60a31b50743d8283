"""
Wanderlust Backend - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test builds its own Settings explicitly (no environment
       variables), pointed at an in-memory SQLite database.

Fixture Hierarchy:
    test_settings ──▶ app ──▶ test_client
                      │
                      └──▶ db_session (same engine as the app)

    mock_db_session: AsyncMock session for pure service unit tests
    hasher / token_service: cheap argon2 costs, fixed test secret
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from wanderlust.config import Settings
from wanderlust.database import create_tables
from wanderlust.main import create_app
from wanderlust.schemas.auth import TokenClaims
from wanderlust.services.passwords import PasswordHasher
from wanderlust.services.tokens import TokenService

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "jwt_secret": TEST_SECRET,
        # Minimal argon2 costs keep the suite fast.
        "password_time_cost": 1,
        "password_memory_cost": 1024,
        "password_parallelism": 1,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ══════════════════════════════════════════════════════════════════════════
# Unit-Level Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def hasher(test_settings) -> PasswordHasher:
    return PasswordHasher.from_settings(test_settings)


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService.from_settings(test_settings)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = user
        mock_db_session.execute = AsyncMock(return_value=result)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings):
    application = create_app(test_settings)
    await create_tables(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def db_session(app) -> AsyncGenerator:
    """A real session on the app's in-memory database, for store-level tests."""
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers(app):
    """Factory for a valid `Authorization` header for any email."""

    def _headers(email: str = "ada@example.com", user_id: str = "user-1") -> dict:
        token = app.state.services.tokens.issue(TokenClaims(id=user_id, email=email))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def trip_body():
    """A complete, valid itinerary submission as the mobile client sends it."""
    return {
        "userEmail": "ada@example.com",
        "currentLocation": "Lisbon",
        "destination": "Kyoto",
        "startDate": "2026-04-01",
        "endDate": "2026-04-06",
        "travelers": 2,
        "budget": 1500,
        "days": 5,
        "interests": ["food", "temples"],
        "dietary": "vegetarian",
        "result": [{"day": 1, "plan": "Fushimi Inari at sunrise"}],
        "mapData": {"markers": [{"lat": 34.97, "lng": 135.77}]},
    }
