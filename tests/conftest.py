"""Pytest configuration and fixtures for Garage API tests.

This module provides reusable fixtures for:
- Settings overrides (in-memory SQLite, cheap Argon2 parameters)
- Async test client running the application lifespan
- Database session for repository tests
- Fake Redis and in-memory repositories
- Authentication helpers
"""

import os

# The signing secret is required; set it before the app module is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key")

from collections.abc import AsyncGenerator, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from garage.config import Settings  # noqa: E402
from garage.core.database import Database  # noqa: E402
from garage.core.password import PasswordHasher  # noqa: E402
from garage.main import create_app  # noqa: E402
from garage.services.cache import CacheService  # noqa: E402
from tests.mocks.fake_redis import FakeRedis  # noqa: E402
from tests.mocks.repositories import (  # noqa: E402
    InMemoryCarRepository,
    InMemoryPartRepository,
    InMemoryUserRepository,
)

# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create test-specific settings.

    Uses an in-memory SQLite database with tables created at startup, no
    Redis URL (tests plug a FakeRedis in) and the cheapest Argon2 costs.
    """
    return Settings(
        app_env="development",  # type: ignore[arg-type]
        debug=False,
        log_level="DEBUG",  # type: ignore[arg-type]
        log_format="console",  # type: ignore[arg-type]
        database_url="sqlite+aiosqlite:///:memory:",
        database_create_tables=True,
        redis_url=None,
        jwt_secret_key="test-jwt-secret-key",  # type: ignore[arg-type]
        password_hash_time_cost=1,
        password_hash_memory_cost=8,
        password_hash_parallelism=1,
        password_hash_workers=1,
    )


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Create an in-process Redis double."""
    return FakeRedis()


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Create a test FastAPI application with test settings."""
    return create_app(settings=test_settings)


@pytest.fixture
async def async_client(
    app: FastAPI, fake_redis: FakeRedis
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing.

    ASGITransport does not emit lifespan events, so the lifespan is entered
    here. The fake Redis is plugged in once startup has run.

    Usage:
        async def test_endpoint(async_client: AsyncClient):
            response = await async_client.get("/health/live")
            assert response.status_code == 200
    """
    async with app.router.lifespan_context(app):
        app.state.redis = fake_redis
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client


@pytest.fixture
async def auth_headers(async_client: AsyncClient) -> dict[str, str]:
    """Register a user and return a bearer Authorization header for it."""
    credentials = {"username": "mechanic", "password": "wrench-1234"}
    response = await async_client.post("/api/v1/users/create", json=credentials)
    assert response.status_code == 201

    response = await async_client.post("/api/v1/auth/authorize", json=credentials)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def db_session(test_settings: Settings) -> AsyncGenerator[AsyncSession, None]:
    """Create an isolated in-memory database with all tables.

    Usage:
        async def test_create_car(db_session: AsyncSession):
            car = await CarRepository(db_session).create(Car(name="Tesla"))
    """
    database = Database.from_settings(test_settings)
    await database.create_tables()
    async with database.session_factory() as session:
        yield session
    await database.close()


# =============================================================================
# Service Double Fixtures
# =============================================================================


@pytest.fixture
def cache(fake_redis: FakeRedis) -> CacheService:
    """Create a CacheService over the fake Redis."""
    return CacheService(fake_redis, ttl=60)


@pytest.fixture
def password_hasher(test_settings: Settings) -> Generator[PasswordHasher, None, None]:
    """Create a password hasher with cheap Argon2 parameters."""
    hasher = PasswordHasher.from_settings(test_settings)
    yield hasher
    hasher.close()


@pytest.fixture
def car_repo() -> InMemoryCarRepository:
    return InMemoryCarRepository()


@pytest.fixture
def part_repo() -> InMemoryPartRepository:
    return InMemoryPartRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()
