"""
Credit window alerts.

Admins are warned about shared leads whose credit window is about to
close or has closed. Alerts are grouped per deal: a deal shared with
three companies yields one alert listing the companies that need
attention. Shares that were credited back are never alerted on.

Urgency:
- critical: 1 day or less remaining (including expired)
- high: 3 days or less
- medium: anything further out
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.models.lead_share import LeadShare
from src.models.system_log import LogType
from src.services.credit_window import (
    EXPIRING_THRESHOLD_DAYS,
    CreditWindowStatus,
    as_utc,
    compute_status,
)
from src.services.lead_sharing import get_credited_pairs
from src.utils.system_log import log_event

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 3


@dataclass(frozen=True)
class AlertCompany:
    company_id: int
    name: str
    email: Optional[str]
    shared_at: datetime
    credit_window_expires: datetime
    days_remaining: int
    status: CreditWindowStatus


@dataclass(frozen=True)
class CreditAlert:
    deal_id: int
    deal_title: Optional[str]
    opener: str
    companies: tuple[AlertCompany, ...]
    has_credits: bool

    @property
    def credit_window_expires(self) -> datetime:
        return self.companies[0].credit_window_expires

    @property
    def days_remaining(self) -> int:
        return self.companies[0].days_remaining

    @property
    def status(self) -> CreditWindowStatus:
        return self.companies[0].status

    @property
    def urgency(self) -> str:
        return urgency_for(self.days_remaining)


def urgency_for(days_remaining: int) -> str:
    if days_remaining <= 1:
        return "critical"
    if days_remaining <= 3:
        return "high"
    return "medium"


def build_alerts(
    shares: Iterable[LeadShare],
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    credited_pairs: Optional[set[tuple[int, str]]] = None,
) -> list[CreditAlert]:
    """
    Group alert-worthy shares by deal, soonest expiry first.

    Shares need their deal and company relationships loaded.
    """
    credited_pairs = credited_pairs or set()
    ordered = sorted(shares, key=lambda s: (as_utc(s.credit_window_expires), s.deal_id, s.company_id))

    groups: dict[int, list[AlertCompany]] = {}
    deals = {}
    for share in ordered:
        credited = (share.deal_id, share.company.name) in credited_pairs
        window = compute_status(share.credit_window_expires, now, credited=credited)

        if window.status == CreditWindowStatus.CREDITED:
            continue
        if window.status == CreditWindowStatus.ACTIVE and window.days_remaining > horizon_days:
            continue

        groups.setdefault(share.deal_id, []).append(
            AlertCompany(
                company_id=share.company_id,
                name=share.company.name,
                email=share.company.contact_email,
                shared_at=as_utc(share.shared_at),
                credit_window_expires=as_utc(share.credit_window_expires),
                days_remaining=window.days_remaining,
                status=window.status,
            )
        )
        deals[share.deal_id] = share.deal

    credited_deals = {deal_id for deal_id, _ in credited_pairs}
    # dicts keep insertion order, so groups are already sorted by earliest expiry
    return [
        CreditAlert(
            deal_id=deal_id,
            deal_title=deals[deal_id].title,
            opener=deals[deal_id].opener,
            companies=tuple(companies),
            has_credits=deal_id in credited_deals,
        )
        for deal_id, companies in groups.items()
    ]


def summarize_alerts(alerts: list[CreditAlert]) -> dict[str, int]:
    return {
        "total": len(alerts),
        "expiring": sum(1 for a in alerts if a.status == CreditWindowStatus.EXPIRING),
        "expired": sum(1 for a in alerts if a.status == CreditWindowStatus.EXPIRED),
        "active": sum(1 for a in alerts if a.status == CreditWindowStatus.ACTIVE),
        "critical": sum(1 for a in alerts if a.urgency == "critical"),
    }


async def list_expiring_alerts(
    db: AsyncSession,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[CreditAlert]:
    """
    Alerts for every expiring or expired share, plus active shares whose
    window closes within horizon_days.
    """
    now = as_utc(now)
    # EXPIRING shares are alerted on whatever the horizon
    cutoff = now + timedelta(days=max(horizon_days, EXPIRING_THRESHOLD_DAYS))

    result = await db.execute(
        select(LeadShare)
        .options(
            selectinload(LeadShare.deal),
            selectinload(LeadShare.company),
        )
        .where(LeadShare.credit_window_expires <= cutoff)
        .order_by(LeadShare.credit_window_expires.asc(), LeadShare.id.asc())
        .execution_options(populate_existing=True)
    )
    shares = result.scalars().all()
    credited = await get_credited_pairs(db, {s.deal_id for s in shares})

    return build_alerts(shares, now, horizon_days, credited)


async def record_credit_notification(
    db: AsyncSession,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    source: str = "scheduler",
) -> tuple[list[CreditAlert], dict[str, int]]:
    """
    Compute the current alerts and log a notification run.

    Delivery (email, Slack, webhooks) is handled outside this service;
    the logged entry is what downstream dispatchers pick up.
    """
    alerts = await list_expiring_alerts(db, now, horizon_days)
    summary = summarize_alerts(alerts)

    if alerts:
        message = f"Credit window notifications: {len(alerts)} alerts"
    else:
        message = "No credit window alerts to send"

    log_event(
        db,
        type=LogType.CREDIT_NOTIFICATION,
        source=source,
        message=message,
        data={
            **summary,
            "horizon_days": horizon_days,
            "deal_ids": [a.deal_id for a in alerts],
            "critical_deal_ids": [a.deal_id for a in alerts if a.urgency == "critical"],
        },
    )
    await db.flush()

    logger.info(f"{message} ({summary['expiring']} expiring, {summary['expired']} expired)")
    return alerts, summary
