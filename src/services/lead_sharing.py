"""
Sharing approved leads with partner companies.

Each share starts a 14-day credit window for that company. A deal can
be shared with each company once; sharing again with the same company
is refused rather than merged, while the other companies in the same
request are still shared.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.models.commission import Commission
from src.models.company import Company
from src.models.deal import AdminApproval, Deal
from src.models.lead_share import LeadShare, SharingMethod
from src.models.system_log import LogType
from src.services.credit_window import (
    CreditWindowState,
    CreditWindowStatus,
    as_utc,
    compute_status,
    credit_window_expiry,
)
from src.utils.system_log import log_event

logger = logging.getLogger(__name__)


class ShareRejection(str, Enum):
    """Why a deal was not shared with a company."""
    DEAL_NOT_FOUND = "deal_not_found"
    DEAL_NOT_APPROVED = "deal_not_approved"
    COMPANY_NOT_FOUND = "company_not_found"
    COMPANY_NOT_ASSIGNED = "company_not_assigned"
    ALREADY_SHARED = "already_shared"


@dataclass(frozen=True)
class RejectedShare:
    company_id: int
    reason: ShareRejection
    company_name: Optional[str] = None


@dataclass
class ShareResult:
    deal_id: int
    shares: list[LeadShare] = field(default_factory=list)
    rejected: list[RejectedShare] = field(default_factory=list)
    rejection: Optional[ShareRejection] = None
    credit_window_expires: Optional[datetime] = None

    @property
    def shared_count(self) -> int:
        return len(self.shares)


@dataclass(frozen=True)
class ShareStatus:
    share: LeadShare
    window: CreditWindowState
    has_credited: bool


async def share_lead(
    db: AsyncSession,
    deal_id: int,
    company_ids: Iterable[int],
    sharing_method: SharingMethod,
    now: Optional[datetime] = None,
    notes: Optional[str] = None,
    source: str = "admin",
) -> ShareResult:
    """Share a deal with a list of companies.

    Args:
        db: Database session (the caller commits)
        deal_id: Deal to share
        company_ids: Target companies
        sharing_method: email, api or manual
        now: Share time, defaults to the current UTC time
        notes: Optional admin notes stored on each share
        source: Origin recorded in the system log

    Returns:
        ShareResult with created shares and per-company rejections
    """
    sharing_method = SharingMethod(sharing_method)
    shared_at = as_utc(now) if now else datetime.now(timezone.utc)
    expires = credit_window_expiry(shared_at)
    result = ShareResult(deal_id=deal_id)

    deal = (
        await db.execute(
            select(Deal).where(Deal.id == deal_id).with_for_update()
        )
    ).scalar_one_or_none()

    if not deal:
        result.rejection = ShareRejection.DEAL_NOT_FOUND
        return result

    if deal.admin_approval != AdminApproval.APPROVED:
        result.rejection = ShareRejection.DEAL_NOT_APPROVED
        return result

    company_ids = list(dict.fromkeys(company_ids))
    companies = {
        c.id: c
        for c in (
            await db.execute(
                select(Company).where(Company.id.in_(company_ids), Company.active.is_(True))
            )
        ).scalars().all()
    }
    already_shared = set(
        (
            await db.execute(
                select(LeadShare.company_id).where(LeadShare.deal_id == deal_id)
            )
        ).scalars().all()
    )
    assigned = set(deal.assigned_companies())

    for company_id in company_ids:
        company = companies.get(company_id)
        if company is None:
            result.rejected.append(RejectedShare(company_id, ShareRejection.COMPANY_NOT_FOUND))
            continue
        if company.name not in assigned:
            result.rejected.append(
                RejectedShare(company_id, ShareRejection.COMPANY_NOT_ASSIGNED, company.name)
            )
            continue
        if company_id in already_shared:
            result.rejected.append(
                RejectedShare(company_id, ShareRejection.ALREADY_SHARED, company.name)
            )
            continue

        share = LeadShare(
            deal_id=deal_id,
            company_id=company_id,
            shared_at=shared_at,
            credit_window_expires=expires,
            sharing_method=sharing_method,
            email_sent_to=company.contact_email if sharing_method == SharingMethod.EMAIL else None,
            notes=notes,
        )
        db.add(share)
        result.shares.append(share)

        log_event(
            db,
            type=LogType.LEAD_SHARING,
            source=source,
            deal_id=deal_id,
            message=f"Lead {deal_id} shared with {company.name} via {sharing_method.value}",
            data={
                "company_id": company_id,
                "company_name": company.name,
                "sharing_method": sharing_method.value,
                "credit_window_expires": expires.isoformat(),
                "notes": notes,
            },
        )

    if result.shares:
        result.credit_window_expires = expires
        if deal.shared_at is None:
            deal.shared_at = shared_at
        await db.flush()
        logger.info(f"Deal {deal_id} shared with {result.shared_count} companies, window closes {expires}")

    return result


async def share_leads(
    db: AsyncSession,
    deal_ids: Iterable[int],
    company_ids: Iterable[int],
    sharing_method: SharingMethod,
    now: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> list[ShareResult]:
    """Share several deals with the same companies."""
    company_ids = list(company_ids)
    results = []
    for deal_id in deal_ids:
        results.append(await share_lead(db, deal_id, company_ids, sharing_method, now=now, notes=notes))
    return results


async def acknowledge_share(
    db: AsyncSession,
    share_id: int,
    now: Optional[datetime] = None,
) -> Optional[LeadShare]:
    """Mark a share as acknowledged by the company."""
    share = await db.get(LeadShare, share_id)
    if share is None:
        return None
    if not share.acknowledged:
        share.acknowledged = True
        share.acknowledged_at = now or datetime.now(timezone.utc)
        await db.flush()
    return share


async def get_credited_pairs(db: AsyncSession, deal_ids: Iterable[int]) -> set[tuple[int, str]]:
    """(deal_id, company_name) pairs that were credited back."""
    deal_ids = list(deal_ids)
    if not deal_ids:
        return set()
    result = await db.execute(
        select(Commission.deal_id, Commission.company_name).where(
            Commission.deal_id.in_(deal_ids),
            Commission.credited_back.is_(True),
        )
    )
    return {(row.deal_id, row.company_name) for row in result.all()}


async def list_share_statuses(
    db: AsyncSession,
    now: datetime,
    deal_id: Optional[int] = None,
    company_id: Optional[int] = None,
    status: Optional[CreditWindowStatus] = None,
) -> list[ShareStatus]:
    """Lead shares with their credit window state, newest first."""
    now = as_utc(now)
    query = select(LeadShare).options(
        selectinload(LeadShare.company),
        selectinload(LeadShare.deal),
    )
    if deal_id is not None:
        query = query.where(LeadShare.deal_id == deal_id)
    if company_id is not None:
        query = query.where(LeadShare.company_id == company_id)
    query = query.order_by(LeadShare.shared_at.desc(), LeadShare.id.desc()).execution_options(
        populate_existing=True
    )

    shares = (await db.execute(query)).scalars().all()
    credited = await get_credited_pairs(db, {s.deal_id for s in shares})

    statuses = []
    for share in shares:
        has_credited = (share.deal_id, share.company.name) in credited
        window = compute_status(share.credit_window_expires, now, credited=has_credited)
        if status is not None and window.status != status:
            continue
        statuses.append(ShareStatus(share=share, window=window, has_credited=has_credited))
    return statuses
