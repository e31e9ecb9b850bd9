"""PartRepository for managing Part entities."""

from garage.core.exceptions import PartNotFoundError
from garage.models.part import Part
from garage.repositories.base import BaseRepository


class PartRepository(BaseRepository[Part]):
    """Repository for Part entities."""

    search_column = "name"
    sortable_fields = frozenset({"id", "name", "car_id"})
    not_found_error = PartNotFoundError
