"""Part model - optionally attached to a Car."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from garage.models.base import Base, IntegerPrimaryKeyMixin


class Part(IntegerPrimaryKeyMixin, Base):
    """A spare part.

    Referential integrity of ``car_id`` is left to the store.

    Attributes:
        car_id: Owning car, if any
        name: Display name (1-80 chars)
    """

    __tablename__ = "parts"

    car_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("cars.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Part(id={self.id}, car_id={self.car_id}, name='{self.name}')>"
