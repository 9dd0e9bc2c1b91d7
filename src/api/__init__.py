"""API router aggregation."""

from fastapi import APIRouter

from src.api.admin import admin_router
from src.api.credits import router as credits_router
from src.api.health import router as health_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(credits_router)

__all__ = ["api_router", "admin_router"]
