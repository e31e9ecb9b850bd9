"""User model - an account that can obtain bearer tokens."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from garage.models.base import Base, IntegerPrimaryKeyMixin


class User(IntegerPrimaryKeyMixin, Base):
    """A registered user.

    Attributes:
        username: Unique login name (3-16 chars, letters, digits, underscore)
        password_hash: Self-describing Argon2 digest, never the plaintext
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(16), nullable=False, unique=True, index=True
    )
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
