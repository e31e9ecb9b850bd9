"""Part request and response schemas."""

from pydantic import Field

from garage.schemas.common import BaseSchema


class PartBase(BaseSchema):
    """Fields shared by every part payload."""

    car_id: int | None = Field(None, description="Car the part belongs to")
    name: str = Field(..., min_length=1, max_length=80, description="Part name")


class PartCreate(PartBase):
    """Payload for creating a part."""


class PartUpdate(PartBase):
    """Full replacement of an existing part."""

    id: int = Field(..., ge=1, description="Part to replace")


class PartResponse(PartBase):
    """A part as returned by the API and stored in the cache."""

    id: int = Field(..., description="Unique identifier")
