"""Part service - orchestrates the part repository and its read-through cache."""

from garage.core.exceptions import PartNotFoundError
from garage.core.logging import get_logger
from garage.models.part import Part
from garage.repositories.base import Repository
from garage.schemas.common import ItemList, ListFilter, Pagination
from garage.schemas.part import PartCreate, PartResponse, PartUpdate
from garage.services.cache import CacheService, ReadThroughCache
from garage.services.common import check_affected_rows

logger = get_logger(__name__)


class PartService:
    """Service for listing, viewing and mutating parts.

    Mirrors CarService: cached single-part reads, invalidation after every
    committed update or delete.
    """

    CACHE_ENTITY = "part"

    def __init__(self, repo: Repository[Part], cache: CacheService) -> None:
        self.repo = repo
        self.lookup = ReadThroughCache(cache, self.CACHE_ENTITY, PartResponse)

    async def find_all(
        self, filter: ListFilter, pagination: Pagination
    ) -> ItemList[PartResponse]:
        parts, total = await self.repo.find_all(filter, pagination)
        return ItemList[PartResponse](
            data=[PartResponse.model_validate(part) for part in parts],
            total=total,
        )

    async def view(self, part_id: int) -> PartResponse:
        return await self.lookup.view(part_id, self._load)

    async def create(self, new_part: PartCreate) -> PartResponse:
        part = await self.repo.create(Part(**new_part.model_dump()))
        logger.info("part_created", part_id=part.id, car_id=part.car_id)
        return PartResponse.model_validate(part)

    async def update(self, part: PartUpdate) -> PartResponse:
        updated = await self.repo.update(Part(**part.model_dump()))
        await self.lookup.invalidate(part.id)
        logger.info("part_updated", part_id=part.id)
        return PartResponse.model_validate(updated)

    async def delete(self, part_id: int) -> int:
        affected_rows = await self.repo.delete(part_id)
        await self.lookup.invalidate(part_id)
        check_affected_rows(affected_rows, PartNotFoundError(part_id), "part")
        logger.info("part_deleted", part_id=part_id)
        return affected_rows

    async def _load(self, part_id: int) -> PartResponse:
        logger.info("part_fetch_from_db", part_id=part_id)
        return PartResponse.model_validate(await self.repo.find_by_id(part_id))
