"""Tests for CacheService and ReadThroughCache.

Tests the Redis wrapper's miss-on-error behaviour, key generation and the
cache-aside protocol used for single-item lookups.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from garage.core.exceptions import CarNotFoundError
from garage.schemas.car import CarResponse
from garage.services.cache import (
    SET_IF_VERSION_SCRIPT,
    CacheService,
    ReadThroughCache,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock Redis client."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.eval = AsyncMock(return_value=1)
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def cache_service(mock_redis: MagicMock) -> CacheService:
    """Create CacheService with mock Redis."""
    return CacheService(mock_redis, ttl=60)


@pytest.fixture
def car_lookup(cache_service: CacheService) -> ReadThroughCache[CarResponse]:
    return ReadThroughCache(cache_service, "car", CarResponse)


def tesla(car_id: int = 1, color: str = "Red") -> CarResponse:
    return CarResponse(id=car_id, name="Tesla", color=color, year=2020)


# =============================================================================
# Cache Key Generation Tests
# =============================================================================


class TestCacheKeyGeneration:
    """Tests for entity key generation."""

    def test_car_key(self) -> None:
        assert CacheService.entity_key("car", 42) == "car:42"

    def test_part_key(self) -> None:
        assert CacheService.entity_key("part", 7) == "part:7"

    def test_lookup_key_uses_entity(
        self, car_lookup: ReadThroughCache[CarResponse]
    ) -> None:
        assert car_lookup.key(3) == "car:3"


# =============================================================================
# Get Tests
# =============================================================================


class TestCacheGet:
    """Tests for cache get operations."""

    @pytest.mark.asyncio
    async def test_get_miss(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        """Test cache miss returns None."""
        mock_redis.get.return_value = None

        assert await cache_service.get("car:1") is None

    @pytest.mark.asyncio
    async def test_get_hit(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        """Test cache hit returns the decoded snapshot."""
        mock_redis.get.return_value = json.dumps({"id": 1, "name": "Tesla"}).encode()

        result = await cache_service.get("car:1")

        assert result == {"id": 1, "name": "Tesla"}
        mock_redis.get.assert_awaited_once_with("car:1")

    @pytest.mark.asyncio
    async def test_get_handles_redis_error(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        """Test that Redis errors are downgraded to a miss."""
        mock_redis.get.side_effect = RedisConnectionError("Connection refused")

        assert await cache_service.get("car:1") is None

    @pytest.mark.asyncio
    async def test_get_undecodable_value_is_miss(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        mock_redis.get.return_value = b"{not json"

        assert await cache_service.get("car:1") is None

    @pytest.mark.asyncio
    async def test_get_non_object_value_is_miss(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        mock_redis.get.return_value = b"[1, 2, 3]"

        assert await cache_service.get("car:1") is None

    @pytest.mark.asyncio
    async def test_get_when_disabled(self) -> None:
        """Test that a service without a client always misses."""
        cache = CacheService(None)

        assert cache.enabled is False
        assert await cache.get("car:1") is None


# =============================================================================
# Version Tests
# =============================================================================


class TestCacheVersion:
    """Tests for reading the invalidation counter of a key."""

    @pytest.mark.asyncio
    async def test_version_of_untouched_key_is_zero(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        assert await cache_service.version("car:1") == 0
        mock_redis.get.assert_awaited_once_with("car:1:v")

    @pytest.mark.asyncio
    async def test_version_after_invalidations(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        mock_redis.get.return_value = b"3"

        assert await cache_service.version("car:1") == 3

    @pytest.mark.asyncio
    async def test_version_unreadable(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        """Test that an unknown version is reported as None, not as 0."""
        mock_redis.get.side_effect = RedisConnectionError("Connection refused")

        assert await cache_service.version("car:1") is None

    @pytest.mark.asyncio
    async def test_version_undecodable(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        mock_redis.get.return_value = b"abc"

        assert await cache_service.version("car:1") is None

    @pytest.mark.asyncio
    async def test_version_when_disabled(self) -> None:
        assert await CacheService(None).version("car:1") is None


# =============================================================================
# Set Tests
# =============================================================================


class TestCacheSetIfVersion:
    """Tests for version-guarded cache writes."""

    @pytest.mark.asyncio
    async def test_set_runs_script_with_ttl(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        data = {"id": 1, "name": "Tesla"}

        assert await cache_service.set_if_version("car:1", data, 4) is True

        mock_redis.eval.assert_awaited_once_with(
            SET_IF_VERSION_SCRIPT, 2, "car:1", "car:1:v", "4", 60, json.dumps(data)
        )

    @pytest.mark.asyncio
    async def test_set_rejected_after_invalidation(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        mock_redis.eval.return_value = 0

        assert await cache_service.set_if_version("car:1", {"id": 1}, 0) is False

    @pytest.mark.asyncio
    async def test_set_handles_redis_error(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        """Test that a failed write does not raise."""
        mock_redis.eval.side_effect = RedisConnectionError("Connection refused")

        assert await cache_service.set_if_version("car:1", {"id": 1}, 0) is False

    @pytest.mark.asyncio
    async def test_set_when_disabled(self) -> None:
        assert await CacheService(None).set_if_version("car:1", {"id": 1}, 0) is False


# =============================================================================
# Invalidate Tests
# =============================================================================


class TestCacheInvalidate:
    """Tests for cache invalidation."""

    @pytest.mark.asyncio
    async def test_invalidate_bumps_version_then_deletes(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        await cache_service.invalidate("car:1")

        mock_redis.incr.assert_awaited_once_with("car:1:v")
        mock_redis.expire.assert_awaited_once_with(
            "car:1:v", CacheService.VERSION_TTL
        )
        mock_redis.delete.assert_awaited_once_with("car:1")

    @pytest.mark.asyncio
    async def test_invalidate_absent_key(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        """Test that deleting a missing key is a no-op."""
        mock_redis.delete.return_value = 0

        await cache_service.invalidate("car:404")

    @pytest.mark.asyncio
    async def test_invalidate_handles_redis_error(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        mock_redis.incr.side_effect = RedisConnectionError("Connection refused")

        await cache_service.invalidate("car:1")


# =============================================================================
# Ping Tests
# =============================================================================


class TestCachePing:
    @pytest.mark.asyncio
    async def test_ping_ok(self, cache_service: CacheService) -> None:
        assert await cache_service.ping() is True

    @pytest.mark.asyncio
    async def test_ping_failure(
        self, cache_service: CacheService, mock_redis: MagicMock
    ) -> None:
        mock_redis.ping.side_effect = RedisConnectionError("Connection refused")

        assert await cache_service.ping() is False

    @pytest.mark.asyncio
    async def test_ping_when_disabled(self) -> None:
        assert await CacheService(None).ping() is False


# =============================================================================
# Read-Through Tests
# =============================================================================


class TestReadThroughCache:
    """Tests for the cache-aside protocol."""

    @pytest.mark.asyncio
    async def test_miss_loads_and_populates(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        load = AsyncMock(return_value=tesla())

        result = await car_lookup.view(1, load)

        assert result == tesla()
        load.assert_awaited_once_with(1)
        mock_redis.eval.assert_awaited_once_with(
            SET_IF_VERSION_SCRIPT,
            2,
            "car:1",
            "car:1:v",
            "0",
            60,
            json.dumps(tesla().model_dump(mode="json")),
        )

    @pytest.mark.asyncio
    async def test_version_is_read_before_loading(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        """Test that the write is guarded by the version seen before the load."""
        mock_redis.get.side_effect = [None, b"2"]
        load = AsyncMock(return_value=tesla())

        await car_lookup.view(1, load)

        assert mock_redis.get.await_args_list[1].args == ("car:1:v",)
        assert mock_redis.eval.await_args.args[4] == "2"

    @pytest.mark.asyncio
    async def test_unknown_version_skips_store(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        mock_redis.get.side_effect = [None, RedisConnectionError("Connection refused")]
        load = AsyncMock(return_value=tesla())

        assert await car_lookup.view(1, load) == tesla()
        mock_redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hit_skips_loader(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        mock_redis.get.return_value = tesla().model_dump_json().encode()
        load = AsyncMock()

        result = await car_lookup.view(1, load)

        assert result == tesla()
        load.assert_not_awaited()
        mock_redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_snapshot_is_treated_as_miss(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        mock_redis.get.side_effect = [json.dumps({"id": "x"}).encode(), None]
        load = AsyncMock(return_value=tesla())

        result = await car_lookup.view(1, load)

        assert result == tesla()
        load.assert_awaited_once_with(1)
        mock_redis.eval.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_found_is_not_cached(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        load = AsyncMock(side_effect=CarNotFoundError(404))

        with pytest.raises(CarNotFoundError):
            await car_lookup.view(404, load)

        mock_redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unreachable_cache_falls_through(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        """Test that a Redis outage does not fail the read."""
        mock_redis.get.side_effect = RedisConnectionError("Connection refused")
        mock_redis.eval.side_effect = RedisConnectionError("Connection refused")
        load = AsyncMock(return_value=tesla())

        assert await car_lookup.view(1, load) == tesla()
        load.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_invalidate_deletes_key(
        self, car_lookup: ReadThroughCache[CarResponse], mock_redis: MagicMock
    ) -> None:
        await car_lookup.invalidate(5)

        mock_redis.incr.assert_awaited_once_with("car:5:v")
        mock_redis.delete.assert_awaited_once_with("car:5")
