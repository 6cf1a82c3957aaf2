# This file makes the 'routes' directory a Python package.

from fastapi import APIRouter

from lms_backend.core.config import settings
from .learning_routes import router as learning_router
from .admin_routes import router as admin_router

api_router_v1 = APIRouter(prefix=settings.API_V1_STR)

# Learner-facing routes
api_router_v1.include_router(learning_router)

# Admin routes - already prefixed with /admin, so they end up under /api/v1/admin/...
api_router_v1.include_router(admin_router)

__all__ = [
    "api_router_v1"
]
