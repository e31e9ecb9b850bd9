"""FastAPI dependency injection container.

This module provides dependency injection functions for use with FastAPI's
Depends() pattern. Long-lived resources (Redis client, password hasher) are
created in the application lifespan and read from ``app.state``, so tests
can swap any of them through ``app.dependency_overrides``.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from garage.config import Settings
from garage.core.database import Database
from garage.core.exceptions import InvalidTokenError
from garage.core.logging import bind_user
from garage.core.password import PasswordHasher
from garage.repositories.car import CarRepository
from garage.repositories.part import PartRepository
from garage.repositories.user import UserRepository
from garage.schemas.auth import Claims
from garage.services.auth import AuthService
from garage.services.cache import CacheService
from garage.services.cars import CarService
from garage.services.parts import PartService
from garage.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False)


# ========================================
# Settings Dependencies
# ========================================
def get_settings_from_request(request: Request) -> Settings:
    """Get settings from request state (set during lifespan)."""
    return request.app.state.settings


# ========================================
# Database Dependencies
# ========================================
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session.

    Repositories commit their own writes; the session is rolled back and
    closed if the request fails.

    Yields:
        AsyncSession: Database session
    """
    database: Database = request.app.state.db
    async for session in database.session():
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


# ========================================
# Infrastructure Dependencies
# ========================================
def get_cache_service(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings_from_request)],
) -> CacheService:
    """Get a cache service over the shared Redis client.

    Caching is disabled when no Redis client was configured.
    """
    return CacheService(request.app.state.redis, ttl=settings.cache_ttl_seconds)


def get_password_hasher(request: Request) -> PasswordHasher:
    """Get the password hasher created at startup."""
    return request.app.state.password_hasher


# ========================================
# Repository Dependencies
# ========================================
def get_user_repository(session: SessionDep) -> UserRepository:
    return UserRepository(session)


def get_car_repository(session: SessionDep) -> CarRepository:
    return CarRepository(session)


def get_part_repository(session: SessionDep) -> PartRepository:
    return PartRepository(session)


# ========================================
# Service Dependencies
# ========================================
def get_car_service(
    repo: Annotated[CarRepository, Depends(get_car_repository)],
    cache: Annotated[CacheService, Depends(get_cache_service)],
) -> CarService:
    return CarService(repo, cache)


def get_part_service(
    repo: Annotated[PartRepository, Depends(get_part_repository)],
    cache: Annotated[CacheService, Depends(get_cache_service)],
) -> PartService:
    return PartService(repo, cache)


def get_user_service(
    repo: Annotated[UserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    return UserService(repo, hasher)


def get_auth_service(
    repo: Annotated[UserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    settings: Annotated[Settings, Depends(get_settings_from_request)],
) -> AuthService:
    return AuthService(repo, hasher, settings)


# ========================================
# Auth Dependencies
# ========================================
async def get_current_claims(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> Claims:
    """Verify the bearer token of the current request.

    Raises:
        InvalidTokenError: If the header is missing or the token is invalid
    """
    if credentials is None:
        raise InvalidTokenError(message="Missing bearer token")
    claims = auth.authorize(credentials.credentials)
    bind_user(claims.sub)
    return claims


CurrentClaims = Annotated[Claims, Depends(get_current_claims)]
