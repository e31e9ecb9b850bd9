"""Car service - orchestrates the car repository and its read-through cache.

Single-car reads go through the cache. Updates and deletes persist first
and then invalidate the cached snapshot before returning, so once a write
has been acknowledged no reader can get the previous value from the cache.
"""

from garage.core.exceptions import CarNotFoundError
from garage.core.logging import get_logger
from garage.models.car import Car
from garage.repositories.base import Repository
from garage.schemas.car import CarCreate, CarResponse, CarUpdate
from garage.schemas.common import ItemList, ListFilter, Pagination
from garage.services.cache import CacheService, ReadThroughCache
from garage.services.common import check_affected_rows

logger = get_logger(__name__)


class CarService:
    """Service for listing, viewing and mutating cars.

    Usage:
        ```python
        service = CarService(CarRepository(session), cache)
        car = await service.view(42)
        ```
    """

    CACHE_ENTITY = "car"

    def __init__(self, repo: Repository[Car], cache: CacheService) -> None:
        """Initialize the service.

        Args:
            repo: Repository for Car entities
            cache: Cache service used for single-car reads
        """
        self.repo = repo
        self.lookup = ReadThroughCache(cache, self.CACHE_ENTITY, CarResponse)

    async def find_all(
        self, filter: ListFilter, pagination: Pagination
    ) -> ItemList[CarResponse]:
        """List cars matching the filter, one page at a time."""
        cars, total = await self.repo.find_all(filter, pagination)
        return ItemList[CarResponse](
            data=[CarResponse.model_validate(car) for car in cars],
            total=total,
        )

    async def view(self, car_id: int) -> CarResponse:
        """Get a car, from the cache when possible.

        Raises:
            CarNotFoundError: If the car does not exist
        """
        return await self.lookup.view(car_id, self._load)

    async def create(self, new_car: CarCreate) -> CarResponse:
        """Create a car."""
        car = await self.repo.create(Car(**new_car.model_dump()))
        logger.info("car_created", car_id=car.id)
        return CarResponse.model_validate(car)

    async def update(self, car: CarUpdate) -> CarResponse:
        """Replace a car and drop its cached snapshot.

        Raises:
            CarNotFoundError: If the car does not exist
        """
        updated = await self.repo.update(Car(**car.model_dump()))
        await self.lookup.invalidate(car.id)
        logger.info("car_updated", car_id=car.id)
        return CarResponse.model_validate(updated)

    async def delete(self, car_id: int) -> int:
        """Delete a car and drop its cached snapshot.

        Returns:
            Number of deleted rows (1)

        Raises:
            CarNotFoundError: If the car does not exist
            InvariantViolationError: If more than one row was deleted
        """
        affected_rows = await self.repo.delete(car_id)
        await self.lookup.invalidate(car_id)
        check_affected_rows(affected_rows, CarNotFoundError(car_id), "car")
        logger.info("car_deleted", car_id=car_id)
        return affected_rows

    async def _load(self, car_id: int) -> CarResponse:
        logger.info("car_fetch_from_db", car_id=car_id)
        return CarResponse.model_validate(await self.repo.find_by_id(car_id))
