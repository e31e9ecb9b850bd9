"""User request and response schemas.

Passwords only ever travel inwards: no response schema has a password or
digest field.
"""

from pydantic import ConfigDict, Field

from garage.schemas.common import BaseSchema

USERNAME_PATTERN = r"^[0-9A-Za-z_]+$"
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 16
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 32


class UserAuth(BaseSchema):
    """Username and plaintext password, used to register and change passwords."""

    # Passwords are taken verbatim, surrounding whitespace included
    model_config = ConfigDict(str_strip_whitespace=False)

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
        description="Letters, digits and underscore",
    )
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Plaintext password, hashed before storage",
    )


class UserResponse(BaseSchema):
    """Public view of a user."""

    id: int = Field(..., description="Unique identifier")
    username: str = Field(..., description="Login name")
