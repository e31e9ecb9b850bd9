"""Car request and response schemas."""

from pydantic import Field

from garage.schemas.common import BaseSchema


class CarBase(BaseSchema):
    """Fields shared by every car payload."""

    name: str = Field(..., min_length=1, max_length=80, description="Car name")
    color: str | None = Field(None, max_length=80, description="Car color")
    year: int | None = Field(None, ge=-32768, le=32767, description="Model year")


class CarCreate(CarBase):
    """Payload for creating a car."""


class CarUpdate(CarBase):
    """Full replacement of an existing car."""

    id: int = Field(..., ge=1, description="Car to replace")


class CarResponse(CarBase):
    """A car as returned by the API and stored in the cache."""

    id: int = Field(..., description="Unique identifier")
