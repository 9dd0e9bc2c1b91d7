"""
Provision Tracker - opener commission and credit window service

Main FastAPI application with:
- Deal import and admin approval
- Commission calculation
- Lead sharing with 14-day credit windows
- Daily credit window notifications
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api import admin_router, api_router
from src.config import settings
from src.db import get_db_context
from src.models import CommissionRule, RuleName
from src.scheduler.jobs import scheduler, setup_scheduler

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def init_commission_rules(db) -> None:
    """Create any missing commission rule with its configured amount."""
    default_rules = {
        RuleName.BASE_BONUS: (settings.base_bonus_sek, "Grundbonus per godkänd affär"),
        RuleName.OFFERT_RATE: (settings.offert_rate_sek, "Provision per offert-företag"),
        RuleName.PLATSBESOK_RATE: (settings.platsbesok_rate_sek, "Provision per platsbesök-företag"),
    }

    for name, (value, description) in default_rules.items():
        existing = await db.get(CommissionRule, name)
        if not existing:
            db.add(CommissionRule(name=name, value=value, description=description))
            logger.info(f"Created commission rule: {name.value} = {value}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Initializes missing commission rules
    - Starts the scheduler

    Shutdown:
    - Stops the scheduler
    """
    logger.info("Starting Provision Tracker...")

    async with get_db_context() as db:
        await init_commission_rules(db)
        await db.commit()

    if settings.scheduler_enabled:
        setup_scheduler()
        scheduler.start()

    logger.info("Provision Tracker started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down Provision Tracker...")
    if scheduler.running:
        scheduler.shutdown(wait=False)


# Create FastAPI application
app = FastAPI(
    title="Provision Tracker",
    description="Opener commission and credit window tracking",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# Include routers
app.include_router(api_router)  # /api/* endpoints
app.include_router(admin_router)  # /admin/* endpoints


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
