"""Redis-backed cache-aside layer for single-item lookups.

This module provides:
- CacheService: a thin Redis wrapper where every failure is logged and
  downgraded (a read becomes a miss, a write or delete becomes a no-op)
- ReadThroughCache: the cache-aside protocol for one entity type

The cache is never the source of truth. Entries are JSON snapshots of the
response schema under ``{entity}:{id}`` with a fixed TTL, populated only on
a read miss and deleted on every update or delete of that id.

Every key has a version counter under ``{entity}:{id}:v``. Invalidation bumps
it before deleting the snapshot, and a reader only stores what it loaded if
the version is still the one it saw before loading. A read that overlaps an
update therefore cannot put the pre-update row back into the cache.

Cache Key Types:
    - car:{id} - Car snapshot (60s TTL)
    - part:{id} - Part snapshot (60s TTL)
    - car:{id}:v, part:{id}:v - Version counters (1 day TTL)
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError
from redis.asyncio import Redis

from garage.core.exceptions import CacheError
from garage.core.logging import get_logger

logger = get_logger(__name__)

S = TypeVar("S", bound=BaseModel)

# KEYS[1] snapshot key, KEYS[2] version key
# ARGV[1] version seen before loading, ARGV[2] ttl, ARGV[3] snapshot
SET_IF_VERSION_SCRIPT = """
local current = redis.call('GET', KEYS[2]) or '0'
if current == ARGV[1] then
    redis.call('SETEX', KEYS[1], ARGV[2], ARGV[3])
    return 1
end
return 0
"""


class CacheService:
    """Redis caching with a fixed TTL and miss-on-error reads.

    A ``None`` client disables caching: every read misses and every write
    is skipped.

    Usage with FastAPI:
        ```python
        from garage.dependencies import get_cache_service

        @router.get("/{car_id}")
        async def view(cache: CacheService = Depends(get_cache_service)):
            ...
        ```
    """

    DEFAULT_TTL = 60
    VERSION_TTL = 86400

    def __init__(self, redis: Redis | None, ttl: int = DEFAULT_TTL) -> None:
        """Initialize the cache service.

        Args:
            redis: Async Redis client, or None when caching is disabled
            ttl: Expiry of every entry in seconds
        """
        self.redis = redis
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    async def get(self, cache_key: str) -> dict[str, Any] | None:
        """Get a cached snapshot.

        Returns:
            The decoded snapshot, or None on a miss, an unreachable cache or
            an undecodable value
        """
        try:
            raw = await self._execute("get", cache_key)
        except CacheError:
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("cache_value_undecodable", cache_key=cache_key, error=str(e))
            return None

        if not isinstance(data, dict):
            logger.warning("cache_value_unexpected", cache_key=cache_key)
            return None
        return data

    async def version(self, cache_key: str) -> int | None:
        """Read the version counter of a key.

        Returns:
            The current version (0 if never invalidated), or None when it
            cannot be read, in which case nothing may be stored for the key
        """
        try:
            raw = await self._execute("get", self.version_key(cache_key))
        except CacheError:
            return None

        if raw is None:
            return 0
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("cache_version_undecodable", cache_key=cache_key)
            return None

    async def set_if_version(
        self, cache_key: str, data: dict[str, Any], version: int
    ) -> bool:
        """Store a snapshot unless the key was invalidated since ``version``.

        The check and the write run atomically on the server. Failures are
        logged and swallowed.

        Returns:
            True if the snapshot was stored
        """
        try:
            stored = await self._execute(
                "eval",
                SET_IF_VERSION_SCRIPT,
                2,
                cache_key,
                self.version_key(cache_key),
                str(version),
                self.ttl,
                json.dumps(data),
            )
        except CacheError:
            return False

        if not stored:
            logger.debug("cache_set_skipped_stale", cache_key=cache_key, version=version)
            return False
        logger.debug("cache_set", cache_key=cache_key, ttl=self.ttl)
        return True

    async def invalidate(self, cache_key: str) -> None:
        """Bump the version of a key and delete its snapshot.

        Deleting an absent key is a no-op. Failures are logged and swallowed.
        """
        version_key = self.version_key(cache_key)
        try:
            await self._execute("incr", version_key)
            await self._execute("expire", version_key, self.VERSION_TTL)
            await self._execute("delete", cache_key)
        except CacheError:
            return
        logger.debug("cache_invalidated", cache_key=cache_key)

    async def ping(self) -> bool:
        """Check if Redis answers.

        Returns:
            True if healthy, False otherwise (including when disabled)
        """
        try:
            return bool(await self._execute("ping"))
        except CacheError:
            return False

    async def _execute(self, command: str, *args: Any) -> Any:
        """Run one Redis command, wrapping any failure in CacheError."""
        if self.redis is None:
            raise CacheError(message="Cache is disabled")
        try:
            return await getattr(self.redis, command)(*args)
        except Exception as e:
            logger.warning(
                f"cache_{command}_failed",
                error=str(e),
            )
            raise CacheError() from e

    # -------------------------------------------------------------------------
    # Cache Key Generators
    # -------------------------------------------------------------------------

    @staticmethod
    def entity_key(entity: str, id: int) -> str:
        """Generate the cache key of one entity.

        Args:
            entity: Entity name (e.g., "car")
            id: Entity id

        Returns:
            Cache key (e.g., "car:42")
        """
        return f"{entity}:{id}"

    @staticmethod
    def version_key(cache_key: str) -> str:
        """Generate the version counter key of a cache key (e.g., "car:42:v")."""
        return f"{cache_key}:v"


class ReadThroughCache(Generic[S]):
    """Cache-aside lookups of one entity type.

    ``view`` serves a hit straight from Redis and falls back to the loader
    on any miss. ``invalidate`` must be awaited by every update and delete
    of the id before the write is acknowledged.

    Usage:
        ```python
        lookup = ReadThroughCache(cache, "car", CarResponse)
        car = await lookup.view(42, load_car)
        await lookup.invalidate(42)
        ```
    """

    def __init__(self, cache: CacheService, entity: str, schema: type[S]) -> None:
        self.cache = cache
        self.entity = entity
        self.schema = schema

    def key(self, id: int) -> str:
        return CacheService.entity_key(self.entity, id)

    async def view(self, id: int, load: Callable[[int], Awaitable[S]]) -> S:
        """Get an item, from the cache when possible.

        Args:
            id: Entity id
            load: Reads the item from the repository on a miss

        Returns:
            The item

        Raises:
            Whatever ``load`` raises, unchanged (e.g. NotFoundError)
        """
        cache_key = self.key(id)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            try:
                item = self.schema.model_validate(cached)
            except SchemaValidationError as e:
                logger.warning("cache_snapshot_invalid", cache_key=cache_key, error=str(e))
            else:
                logger.debug("cache_hit", cache_key=cache_key)
                return item

        logger.debug("cache_miss", cache_key=cache_key)
        # Must be read before loading so a concurrent invalidation is noticed
        version = await self.cache.version(cache_key)
        item = await load(id)

        if version is not None:
            await self.cache.set_if_version(
                cache_key, item.model_dump(mode="json"), version
            )
        return item

    async def invalidate(self, id: int) -> None:
        """Drop the cached snapshot of an id, present or not."""
        await self.cache.invalidate(self.key(id))
