"""Token endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from garage.dependencies import CurrentClaims, get_auth_service
from garage.schemas.auth import LoginRequest, TokenResponse
from garage.schemas.common import ErrorResponse
from garage.services.auth import AuthService

router = APIRouter()


@router.post(
    "/authorize",
    response_model=TokenResponse,
    summary="Obtain a bearer token",
    responses={
        400: {"model": ErrorResponse, "description": "Missing credentials"},
        401: {"model": ErrorResponse, "description": "Wrong credentials"},
    },
)
async def authorize(
    credentials: LoginRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    return await auth.authenticate(credentials.username, credentials.password)


@router.post(
    "/test",
    response_class=PlainTextResponse,
    summary="Check a bearer token",
    responses={401: {"model": ErrorResponse, "description": "Invalid token"}},
)
async def check_token(claims: CurrentClaims) -> str:
    """Echo the claims of a valid token."""
    return (
        "Welcome to the protected area :)\n"
        f"Your data:\nUsername: {claims.sub}\nIssuer: {claims.iss}"
    )
