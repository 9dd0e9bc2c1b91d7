"""
Provision tracker health endpoints.

/ready also checks that the commission rules are seeded, since no deal
can be approved without them.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.services.commission import CommissionDataError, load_commission_rates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    return {"status": "healthy", "service": "provision-tracker"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Database reachable and all commission rules present."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness: database unreachable: {e}")
        return {"status": "not_ready", "database": f"error: {e}", "commission_rules": "unknown"}

    try:
        await load_commission_rates(db)
    except CommissionDataError as e:
        logger.warning(f"Readiness: {e}")
        return {"status": "not_ready", "database": "connected", "commission_rules": str(e)}

    return {"status": "ready", "database": "connected", "commission_rules": "ok"}


@router.get("/live")
async def liveness_check():
    """Used by the container platform to decide on restarts."""
    return {"status": "alive"}
