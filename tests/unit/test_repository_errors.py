"""Tests for how repositories report a failing store."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from garage.core.exceptions import StorageError
from garage.models import Car
from garage.repositories import CarRepository
from garage.schemas.common import ListFilter, Pagination


@pytest.fixture
def broken_session() -> MagicMock:
    """Create a session whose every statement fails to reach the server."""
    session = MagicMock()
    session.execute = AsyncMock(
        side_effect=OperationalError(
            "SELECT cars.id FROM cars",
            {},
            Exception("could not connect to secret-host:5432"),
        )
    )
    session.flush = AsyncMock(
        side_effect=OperationalError(
            "INSERT INTO cars", {}, Exception("could not connect to secret-host:5432")
        )
    )
    session.rollback = AsyncMock()
    session.commit = AsyncMock()
    return session


class TestStorageFailure:
    @pytest.mark.asyncio
    async def test_find_all(self, broken_session: MagicMock) -> None:
        with pytest.raises(StorageError) as exc_info:
            await CarRepository(broken_session).find_all(ListFilter(), Pagination())

        assert exc_info.value.status_code == 503
        assert "secret-host" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_find_by_id(self, broken_session: MagicMock) -> None:
        with pytest.raises(StorageError):
            await CarRepository(broken_session).find_by_id(1)

    @pytest.mark.asyncio
    async def test_create(self, broken_session: MagicMock) -> None:
        with pytest.raises(StorageError):
            await CarRepository(broken_session).create(Car(name="Tesla"))

        broken_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete(self, broken_session: MagicMock) -> None:
        with pytest.raises(StorageError):
            await CarRepository(broken_session).delete(1)

    @pytest.mark.asyncio
    async def test_connection_refused(self, broken_session: MagicMock) -> None:
        broken_session.execute.side_effect = ConnectionRefusedError(111, "refused")

        with pytest.raises(StorageError):
            await CarRepository(broken_session).find_by_id(1)
