"""Car model."""

from sqlalchemy import SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from garage.models.base import Base, IntegerPrimaryKeyMixin


class Car(IntegerPrimaryKeyMixin, Base):
    """A car that parts can be attached to.

    Attributes:
        name: Display name (1-80 chars)
        color: Optional color
        year: Optional model year
    """

    __tablename__ = "cars"

    name: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    color: Mapped[str | None] = mapped_column(String(80), nullable=True)
    year: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<Car(id={self.id}, name='{self.name}')>"
