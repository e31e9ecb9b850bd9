"""API v1 main router.

Aggregates all v1 API routers into a single router for inclusion in the app.
"""

from fastapi import APIRouter

from garage.api.v1.auth import router as auth_router
from garage.api.v1.cars import router as cars_router
from garage.api.v1.parts import router as parts_router
from garage.api.v1.users import router as users_router
from garage.api.v1.utils import router as utils_router

router = APIRouter()

# Include sub-routers
router.include_router(utils_router, tags=["Utils"])
router.include_router(auth_router, prefix="/auth", tags=["Auth"])
router.include_router(users_router, prefix="/users", tags=["Users"])
router.include_router(cars_router, prefix="/cars", tags=["Cars"])
router.include_router(parts_router, prefix="/parts", tags=["Parts"])
