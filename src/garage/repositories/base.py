"""Repository contract and its generic SQLAlchemy implementation.

This module provides:
- Repository[T]: Protocol every entity repository satisfies, the store-backed
  ones as well as the in-memory doubles used in tests
- BaseRepository[T]: Generic async implementation for SQLAlchemy models

Usage:
    from garage.repositories.base import BaseRepository
    from garage.models.car import Car

    class CarRepository(BaseRepository[Car]):
        search_column = "name"
        not_found_error = CarNotFoundError

    repo = CarRepository(session)
    car = await repo.find_by_id(42)
    cars, total = await repo.find_all(ListFilter(term="Tesla"), Pagination())
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, ClassVar, Generic, Protocol, TypeVar, runtime_checkable

from sqlalchemy import delete, func, inspect, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from garage.core.exceptions import (
    ConflictError,
    GarageError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from garage.core.logging import get_logger
from garage.models.base import Base
from garage.schemas.common import ListFilter, Pagination, SortOrder

logger = get_logger(__name__)

# Type variable for model classes
T = TypeVar("T", bound=Base)


def escape_like(term: str) -> str:
    """Make LIKE wildcards in a search term match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@runtime_checkable
class Repository(Protocol[T]):
    """CRUD capabilities shared by every entity repository.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.
    """

    async def find_all(
        self, filter: ListFilter, pagination: Pagination
    ) -> tuple[list[T], int]:
        """Return one page of matching entities and the total match count."""
        ...

    async def find_by_id(self, id: int) -> T:
        """Return the entity or raise the entity's NotFoundError."""
        ...

    async def create(self, entity: T) -> T:
        """Insert the entity and return it with its generated id."""
        ...

    async def update(self, entity: T) -> T:
        """Replace the stored record that has the entity's id."""
        ...

    async def delete(self, id: int) -> int:
        """Delete by id and return the number of affected rows."""
        ...


class BaseRepository(Generic[T]):
    """Generic repository providing async CRUD operations.

    Every mutating method commits before returning, so a successful return
    means the change is durable.

    Type Parameters:
        T: The SQLAlchemy model class

    Attributes:
        session: The async database session
        model_class: The model class for this repository
        search_column: Column matched by the substring filter
        sortable_fields: Columns a listing may be sorted by
        not_found_error: Error raised for a missing id
    """

    model_class: type[T]
    search_column: ClassVar[str] = "name"
    sortable_fields: ClassVar[frozenset[str]] = frozenset({"id"})
    not_found_error: ClassVar[type[NotFoundError]] = NotFoundError

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: Async database session
        """
        self.session = session

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Extract model class from Generic type parameter."""
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", ()):
            args = getattr(base, "__args__", ())
            if args and isinstance(args[0], type):
                cls.model_class = args[0]
                break

    async def find_all(
        self, filter: ListFilter, pagination: Pagination
    ) -> tuple[list[T], int]:
        """Get one page of entities matching the filter.

        Args:
            filter: Substring term or explicit ids (term wins)
            pagination: Page, page size and sort order

        Returns:
            Tuple of (entities on the page, total matches ignoring paging)

        Raises:
            ValidationError: If the sort field is not sortable
            StorageError: If the store fails
        """
        conditions = self._filter_conditions(filter)
        order_by = self._order_by(pagination)

        async with self._translate_errors("find_all"):
            result = await self.session.execute(
                select(self.model_class)
                .where(*conditions)
                .order_by(*order_by)
                .offset(pagination.offset)
                .limit(pagination.limit)
            )
            items = list(result.scalars().all())

            count = await self.session.execute(
                select(func.count()).select_from(self.model_class).where(*conditions)
            )
            total = count.scalar_one()

        return items, total

    async def find_by_id(self, id: int) -> T:
        """Get a single entity by its id.

        Raises:
            NotFoundError: If no row has this id
        """
        async with self._translate_errors("find_by_id"):
            result = await self.session.execute(
                select(self.model_class)
                .where(self.model_class.id == id)
                .execution_options(populate_existing=True)
            )
            entity = result.scalar_one_or_none()

        if entity is None:
            raise self._not_found(id)
        return entity

    async def create(self, entity: T) -> T:
        """Create a new entity.

        Args:
            entity: The entity to create (id is assigned by the store)

        Returns:
            The created entity with its generated id

        Raises:
            ConflictError: If a unique constraint is violated
        """
        async with self._translate_errors("create"):
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            await self.session.commit()
        return entity

    async def update(self, entity: T) -> T:
        """Replace every column of the stored record with the entity's values.

        Args:
            entity: The entity carrying the id and the new values

        Returns:
            The stored entity after the update

        Raises:
            NotFoundError: If no row has the entity's id
        """
        values = {
            key: getattr(entity, key) for key in self._column_keys() if key != "id"
        }

        async with self._translate_errors("update"):
            result = await self.session.execute(
                update(self.model_class)
                .where(self.model_class.id == entity.id)
                .values(**values)
                .returning(self.model_class)
                .execution_options(populate_existing=True, synchronize_session=False)
            )
            updated = result.scalar_one_or_none()
            if updated is None:
                await self.session.rollback()
                raise self._not_found(entity.id)
            await self.session.commit()

        return updated

    async def delete(self, id: int) -> int:
        """Delete an entity by its id.

        Returns:
            Number of rows removed (0 when the id is unknown)
        """
        async with self._translate_errors("delete"):
            result = await self.session.execute(
                delete(self.model_class)
                .where(self.model_class.id == id)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        return result.rowcount

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _filter_conditions(self, filter: ListFilter) -> list[ColumnElement[bool]]:
        if filter.term is not None:
            column = getattr(self.model_class, self.search_column)
            return [column.ilike(f"%{escape_like(filter.term)}%", escape="\\")]
        if filter.ids:
            return [self.model_class.id.in_(filter.ids)]
        return []

    def _order_by(self, pagination: Pagination) -> list[Any]:
        if pagination.sort_field not in self.sortable_fields:
            raise ValidationError(
                message=f"Cannot sort by '{pagination.sort_field}'",
                field="field",
                details={"allowed": sorted(self.sortable_fields)},
            )
        column = getattr(self.model_class, pagination.sort_field)
        primary = column.desc() if pagination.sort_order == SortOrder.DESC else column.asc()
        if pagination.sort_field == "id":
            return [primary]
        # Stable paging across equal sort keys
        return [primary, self.model_class.id.asc()]

    def _column_keys(self) -> list[str]:
        return [attr.key for attr in inspect(self.model_class).column_attrs]

    def _not_found(self, id: int) -> NotFoundError:
        return self.not_found_error(id)  # type: ignore[call-arg]

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        """Turn driver errors into the storage error taxonomy."""
        try:
            yield
        except GarageError:
            raise
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "repository_conflict",
                table=self.model_class.__tablename__,
                operation=operation,
                error=str(e.orig),
            )
            raise ConflictError() from e
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "repository_storage_failure",
                table=self.model_class.__tablename__,
                operation=operation,
                error=str(e),
            )
            raise StorageError() from e
