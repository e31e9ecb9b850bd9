"""Models package for the Garage API.

This module exports the Base class and all model classes.
"""

from garage.models.base import Base, IntegerPrimaryKeyMixin
from garage.models.car import Car
from garage.models.part import Part
from garage.models.user import User

__all__ = [
    # Base and Mixins
    "Base",
    "IntegerPrimaryKeyMixin",
    # Entities
    "User",
    "Car",
    "Part",
]
