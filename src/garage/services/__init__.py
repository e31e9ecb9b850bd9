"""Services package for the Garage API."""

from garage.services.auth import AuthService
from garage.services.cache import CacheService, ReadThroughCache
from garage.services.cars import CarService
from garage.services.parts import PartService
from garage.services.users import UserService

__all__ = [
    "AuthService",
    "CacheService",
    "ReadThroughCache",
    "CarService",
    "PartService",
    "UserService",
]
