"""Part endpoints.

Reads are public. Creating, updating and deleting a part requires a bearer
token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from garage.api.v1.utils import name_filter_params, pagination_params
from garage.core.logging import get_logger
from garage.dependencies import CurrentClaims, get_part_service
from garage.schemas.part import PartCreate, PartResponse, PartUpdate
from garage.schemas.common import ErrorResponse, ItemList, ListFilter, Pagination
from garage.services.parts import PartService

logger = get_logger(__name__)

router = APIRouter()

PartServiceDep = Annotated[PartService, Depends(get_part_service)]


@router.get(
    "/list",
    response_model=ItemList[PartResponse],
    summary="List parts",
    description="List parts, optionally filtered by name substring or ids.",
)
@router.get(
    "/search",
    response_model=ItemList[PartResponse],
    summary="Search parts",
    description="Same as /list; kept as a separate route for clients.",
)
async def list_parts(
    service: PartServiceDep,
    filter: Annotated[ListFilter, Depends(name_filter_params)],
    pagination: Annotated[Pagination, Depends(pagination_params)],
) -> ItemList[PartResponse]:
    logger.debug(
        "list_parts_request",
        term=filter.term,
        ids=filter.ids,
        page=pagination.page,
        per_page=pagination.per_page,
    )
    return await service.find_all(filter, pagination)


@router.get(
    "/{part_id}",
    response_model=PartResponse,
    summary="Get a part",
    responses={404: {"model": ErrorResponse, "description": "Part not found"}},
)
async def view_part(part_id: int, service: PartServiceDep) -> PartResponse:
    """Get a single part. Served from the cache when a fresh snapshot exists."""
    return await service.view(part_id)


@router.post(
    "/create",
    response_model=PartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a part",
    responses={401: {"model": ErrorResponse, "description": "Invalid token"}},
)
async def create_part(
    part: PartCreate, service: PartServiceDep, claims: CurrentClaims
) -> PartResponse:
    logger.info("create_part_request", username=claims.sub)
    return await service.create(part)


@router.post(
    "/update",
    response_model=PartResponse,
    summary="Replace a part",
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token"},
        404: {"model": ErrorResponse, "description": "Part not found"},
    },
)
async def update_part(
    part: PartUpdate, service: PartServiceDep, claims: CurrentClaims
) -> PartResponse:
    logger.info("update_part_request", part_id=part.id, username=claims.sub)
    return await service.update(part)


@router.delete(
    "/delete/{part_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a part",
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token"},
        404: {"model": ErrorResponse, "description": "Part not found"},
    },
)
async def delete_part(
    part_id: int, service: PartServiceDep, claims: CurrentClaims
) -> Response:
    logger.info("delete_part_request", part_id=part_id, username=claims.sub)
    await service.delete(part_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
