"""
Admin API router - combines all admin sub-routers.

- restaurants: restaurant and table management
- staff: staff account listing and activation

All routes are prefixed with /api/admin
"""

from fastapi import APIRouter

from .restaurants import router as restaurants_router
from .staff import router as staff_router


router = APIRouter(prefix="/api/admin")

router.include_router(restaurants_router)
router.include_router(staff_router)

__all__ = ["router"]
