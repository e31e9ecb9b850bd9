"""Async SQLAlchemy engine and sessions for the relational store.

One ``Database`` is built in the application lifespan and kept on
``app.state.db``. Requests get their session from it through
``garage.dependencies.get_db_session``.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import make_url, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from garage.config import Settings
from garage.core.logging import get_logger
from garage.models import Base

logger = get_logger(__name__)


def engine_options(settings: Settings) -> dict[str, Any]:
    """Pool options for the configured backend.

    SQLite connections are not pooled. An in-memory database exists only on
    its one connection, so that connection is shared by every session.
    """
    url = make_url(settings.database_url)
    if url.get_backend_name() != "sqlite":
        return {
            "pool_size": settings.database_pool_min,
            "max_overflow": max(
                0, settings.database_pool_max - settings.database_pool_min
            ),
            "pool_pre_ping": True,
        }

    in_memory = url.database in (None, "", ":memory:")
    return {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool if in_memory else NullPool,
    }


class Database:
    """Owns the engine and hands out request-scoped sessions.

    Repositories commit their own writes, so a session is only ever rolled
    back here, when the request using it fails.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            **engine_options(settings),
        )
        logger.info("database_engine_created", url=cls.safe_url(settings.database_url))
        return cls(engine)

    @staticmethod
    def safe_url(url: str) -> str:
        return make_url(url).render_as_string(hide_password=True)

    async def create_tables(self) -> None:
        """Create every table of the ORM metadata that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_ensured", tables=sorted(Base.metadata.tables))

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error("database_ping_failed", error=str(e))
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("database_engine_disposed")
