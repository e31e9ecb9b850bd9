"""Authentication schemas."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for obtaining a token.

    No length rules here: empty fields are reported as missing credentials
    and anything else is simply checked against the store.
    """

    username: str = Field("", description="Login name")
    password: str = Field("", description="Plaintext password")


class TokenResponse(BaseModel):
    """A signed bearer token."""

    access_token: str = Field(..., description="JWT to send as Bearer token")
    token_type: str = Field("Bearer", description="Always Bearer")


class Claims(BaseModel):
    """Verified payload of a bearer token."""

    sub: str = Field(..., description="Username the token was issued to")
    iss: str = Field(..., description="Issuer context")
    exp: int = Field(..., description="Expiry as a UNIX timestamp")
    iat: int | None = Field(None, description="Issue time as a UNIX timestamp")
