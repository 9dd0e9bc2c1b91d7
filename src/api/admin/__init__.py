"""Admin API router aggregation."""

from fastapi import APIRouter

from src.api.admin.alerts import router as alerts_router
from src.api.admin.companies import router as companies_router
from src.api.admin.deals import router as deals_router
from src.api.admin.lead_sharing import router as lead_sharing_router

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(deals_router)
admin_router.include_router(companies_router)
admin_router.include_router(lead_sharing_router)
admin_router.include_router(alerts_router)

__all__ = ["admin_router"]
