"""CarRepository for managing Car entities."""

from garage.core.exceptions import CarNotFoundError
from garage.models.car import Car
from garage.repositories.base import BaseRepository


class CarRepository(BaseRepository[Car]):
    """Repository for Car entities."""

    search_column = "name"
    sortable_fields = frozenset({"id", "name", "color", "year"})
    not_found_error = CarNotFoundError
