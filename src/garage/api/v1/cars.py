"""Car endpoints.

Reads are public. Creating, updating and deleting a car requires a bearer
token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from garage.api.v1.utils import name_filter_params, pagination_params
from garage.core.logging import get_logger
from garage.dependencies import CurrentClaims, get_car_service
from garage.schemas.car import CarCreate, CarResponse, CarUpdate
from garage.schemas.common import ErrorResponse, ItemList, ListFilter, Pagination
from garage.services.cars import CarService

logger = get_logger(__name__)

router = APIRouter()

CarServiceDep = Annotated[CarService, Depends(get_car_service)]


@router.get(
    "/list",
    response_model=ItemList[CarResponse],
    summary="List cars",
    description="List cars, optionally filtered by name substring or ids.",
)
@router.get(
    "/search",
    response_model=ItemList[CarResponse],
    summary="Search cars",
    description="Same as /list; kept as a separate route for clients.",
)
async def list_cars(
    service: CarServiceDep,
    filter: Annotated[ListFilter, Depends(name_filter_params)],
    pagination: Annotated[Pagination, Depends(pagination_params)],
) -> ItemList[CarResponse]:
    logger.debug(
        "list_cars_request",
        term=filter.term,
        ids=filter.ids,
        page=pagination.page,
        per_page=pagination.per_page,
    )
    return await service.find_all(filter, pagination)


@router.get(
    "/{car_id}",
    response_model=CarResponse,
    summary="Get a car",
    responses={404: {"model": ErrorResponse, "description": "Car not found"}},
)
async def view_car(car_id: int, service: CarServiceDep) -> CarResponse:
    """Get a single car. Served from the cache when a fresh snapshot exists."""
    return await service.view(car_id)


@router.post(
    "/create",
    response_model=CarResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a car",
    responses={401: {"model": ErrorResponse, "description": "Invalid token"}},
)
async def create_car(
    car: CarCreate, service: CarServiceDep, claims: CurrentClaims
) -> CarResponse:
    logger.info("create_car_request", username=claims.sub)
    return await service.create(car)


@router.post(
    "/update",
    response_model=CarResponse,
    summary="Replace a car",
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token"},
        404: {"model": ErrorResponse, "description": "Car not found"},
    },
)
async def update_car(
    car: CarUpdate, service: CarServiceDep, claims: CurrentClaims
) -> CarResponse:
    logger.info("update_car_request", car_id=car.id, username=claims.sub)
    return await service.update(car)


@router.delete(
    "/delete/{car_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a car",
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token"},
        404: {"model": ErrorResponse, "description": "Car not found"},
    },
)
async def delete_car(
    car_id: int, service: CarServiceDep, claims: CurrentClaims
) -> Response:
    logger.info("delete_car_request", car_id=car_id, username=claims.sub)
    await service.delete(car_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
