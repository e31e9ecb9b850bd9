"""Repository pattern package for the Garage API.

This module exports the repository contract and concrete repositories.
"""

from garage.repositories.base import BaseRepository, Repository
from garage.repositories.car import CarRepository
from garage.repositories.part import PartRepository
from garage.repositories.user import UserRepository

__all__ = [
    # Base
    "Repository",
    "BaseRepository",
    # Entities
    "UserRepository",
    "CarRepository",
    "PartRepository",
]
