"""End-to-end tests for the part endpoints."""

import pytest
from httpx import AsyncClient

from tests.mocks.fake_redis import FakeRedis

PARTS = "/api/v1/parts"


@pytest.mark.asyncio
async def test_part_lifecycle(
    async_client: AsyncClient, auth_headers: dict[str, str], fake_redis: FakeRedis
) -> None:
    car = (
        await async_client.post(
            "/api/v1/cars/create", json={"name": "Tesla"}, headers=auth_headers
        )
    ).json()
    created = await async_client.post(
        f"{PARTS}/create", json={"car_id": car["id"], "name": "Wheel"}, headers=auth_headers
    )
    part = created.json()

    assert created.status_code == 201
    assert (await async_client.get(f"{PARTS}/{part['id']}")).json()["name"] == "Wheel"
    assert f"part:{part['id']}" in fake_redis.store

    await async_client.post(
        f"{PARTS}/update",
        json={"id": part["id"], "car_id": car["id"], "name": "Spare wheel"},
        headers=auth_headers,
    )
    assert (await async_client.get(f"{PARTS}/{part['id']}")).json()["name"] == "Spare wheel"

    deleted = await async_client.delete(f"{PARTS}/delete/{part['id']}", headers=auth_headers)
    assert deleted.status_code == 204
    assert f"part:{part['id']}" not in fake_redis.store
    missing = await async_client.get(f"{PARTS}/{part['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "PART_NOT_FOUND"


@pytest.mark.asyncio
async def test_part_name_length(
    async_client: AsyncClient, auth_headers: dict[str, str]
) -> None:
    response = await async_client.post(
        f"{PARTS}/create", json={"name": "x" * 81}, headers=auth_headers
    )

    assert response.status_code == 400
