"""User endpoints.

Registration, lookups and the credential check are public. Changing a
password or deleting an account requires a bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from garage.api.v1.utils import pagination_params, username_filter_params
from garage.core.logging import get_logger
from garage.dependencies import CurrentClaims, get_user_service
from garage.schemas.common import ErrorResponse, ItemList, ListFilter, Pagination
from garage.schemas.user import UserAuth, UserResponse
from garage.services.users import UserService

logger = get_logger(__name__)

router = APIRouter()

UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.get("/list", response_model=ItemList[UserResponse], summary="List users")
@router.get("/search", response_model=ItemList[UserResponse], summary="Search users")
async def list_users(
    service: UserServiceDep,
    filter: Annotated[ListFilter, Depends(username_filter_params)],
    pagination: Annotated[Pagination, Depends(pagination_params)],
) -> ItemList[UserResponse]:
    return await service.find_all(filter, pagination)


@router.post(
    "/create",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    responses={409: {"model": ErrorResponse, "description": "Username taken"}},
)
async def create_user(user: UserAuth, service: UserServiceDep) -> UserResponse:
    logger.info("create_user_request", username=user.username)
    return await service.create(user)


@router.post(
    "/update",
    response_model=UserResponse,
    summary="Change a password",
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def update_user(
    user: UserAuth, service: UserServiceDep, claims: CurrentClaims
) -> UserResponse:
    logger.info("update_user_request", username=user.username, actor=claims.sub)
    return await service.change_password(user)


@router.delete(
    "/delete/{username}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def delete_user(
    username: str, service: UserServiceDep, claims: CurrentClaims
) -> Response:
    logger.info("delete_user_request", username=username, actor=claims.sub)
    await service.delete(username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/login",
    response_model=UserResponse,
    summary="Check credentials",
    description="Verify a username and password without issuing a token.",
    responses={401: {"model": ErrorResponse, "description": "Wrong credentials"}},
)
async def login(credentials: UserAuth, service: UserServiceDep) -> UserResponse:
    return await service.login(credentials)


@router.get(
    "/{username}",
    response_model=UserResponse,
    summary="Get a user",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def view_user(username: str, service: UserServiceDep) -> UserResponse:
    return await service.view(username)
