"""
Postboard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── test_settings: Settings pointing at a fresh SQLite file in tmp_path
    ├── app: FastAPI app built from test_settings
    ├── test_client: HTTPX AsyncClient with the app lifespan entered
    ├── mock_db_session: Mock AsyncSession (no real DB needed)
    └── sample_post_data: A valid create-post body
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any postboard import so the module-level settings singleton
# never points at ./blog.db during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from postboard.config import Settings  # noqa: E402
from postboard.main import create_app  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def database_url(tmp_path):
    """URL of a SQLite file unique to the current test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def test_settings(database_url):
    return Settings(database_url=database_url, log_level="WARNING")


@pytest.fixture
def app(test_settings):
    # configure_logging=False keeps pytest's caplog handler on the root logger
    return create_app(test_settings, configure_logging=False)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not send lifespan events, so the lifespan is entered
    here; that runs the migrations and puts the Database on app.state.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/posts")
            assert response.status_code == 200
    """
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_delete(mock_db_session):
            mock_db_session.execute.return_value.rowcount = 0
            with pytest.raises(NotFoundError):
                await post_service.delete_post(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_post_data():
    return {"title": "Hi", "content": "World", "date": "2024-01-01"}
