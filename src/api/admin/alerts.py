"""Admin credit window notification endpoints."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db import get_db
from src.models import LogType, SystemLog
from src.schemas.alert import AlertListResponse, CreditAlertResponse, NotificationLogResponse
from src.services.alerts import list_expiring_alerts, record_credit_notification, summarize_alerts

router = APIRouter(prefix="/credit-notifications")


@router.get("/alerts", response_model=AlertListResponse)
async def get_alerts(
    db: AsyncSession = Depends(get_db),
    horizon_days: Optional[int] = Query(None, ge=1, le=14),
):
    """Deals with credit windows closing soon or already closed."""
    alerts = await list_expiring_alerts(
        db,
        datetime.now(timezone.utc),
        horizon_days or settings.alert_horizon_days,
    )
    return AlertListResponse(
        alerts=[CreditAlertResponse.model_validate(a) for a in alerts],
        summary=summarize_alerts(alerts),
    )


@router.post("/run", response_model=AlertListResponse)
async def run_notification(
    db: AsyncSession = Depends(get_db),
):
    """Run the credit window notification immediately."""
    alerts, summary = await record_credit_notification(
        db,
        datetime.now(timezone.utc),
        settings.alert_horizon_days,
        source="manual",
    )
    await db.commit()
    return AlertListResponse(
        alerts=[CreditAlertResponse.model_validate(a) for a in alerts],
        summary=summary,
    )


@router.get("")
async def recent_notifications(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
):
    """Recently logged notification runs."""
    result = await db.execute(
        select(SystemLog)
        .where(SystemLog.type == LogType.CREDIT_NOTIFICATION)
        .order_by(SystemLog.created_at.desc(), SystemLog.id.desc())
        .limit(limit)
    )
    return {
        "notifications": [
            NotificationLogResponse.model_validate(entry)
            for entry in result.scalars().all()
        ]
    }
