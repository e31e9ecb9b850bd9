"""SQLAlchemy Base model and common mixins.

This module provides:
- Base: Declarative base for all models
- IntegerPrimaryKeyMixin: store-generated integer primary key

Usage:
    from garage.models.base import Base, IntegerPrimaryKeyMixin

    class MyModel(IntegerPrimaryKeyMixin, Base):
        __tablename__ = "my_table"
        name: Mapped[str]
"""

from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    All models should inherit from this class to be included in the schema.
    """

    pass


class IntegerPrimaryKeyMixin:
    """Mixin that adds an auto-incrementing integer primary key column."""

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            primary_key=True,
            autoincrement=True,
        )
