"""
Pytest configuration and shared fixtures for testing.
Each test gets its own application backed by an in-memory SQLite database.
"""

import os

# Never read .env files during tests
os.environ["SKIP_ENV_FILE"] = "1"

from contextlib import asynccontextmanager

import bcrypt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from waitlist.config import Settings
from waitlist.main import create_app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_TOKEN = "test-admin-token"
# Low cost factor keeps the suite fast
ADMIN_TOKEN_HASH = bcrypt.hashpw(ADMIN_TOKEN.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


def build_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": TEST_DB_URL,
        "ADMIN_TOKEN_HASH": ADMIN_TOKEN_HASH,
        "RATE_LIMIT_ENABLED": False,
        "LOG_LEVEL": "WARNING",
        "LOG_FILE": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@asynccontextmanager
async def serve(app):
    """Run the app lifespan and yield an HTTP client bound to it."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            timeout=30.0
        ) as ac:
            yield ac


@pytest.fixture
def settings_factory():
    """Build Settings for the test database with per-test overrides."""
    return build_settings


@pytest.fixture
def app_factory(settings_factory):
    """Build an application from Settings overrides."""
    def _make(**overrides):
        return create_app(settings_factory(**overrides))
    return _make


@pytest.fixture
def serve_app():
    return serve


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest_asyncio.fixture(scope="function")
async def client(app):
    """Create a test HTTP client with the lifespan (table creation) applied."""
    async with serve(app) as ac:
        yield ac


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
