"""
Credit-back of shared leads.

A partner company that received a lead can reject it within the credit
window. A successful credit flips the company's Commission row to
CREDITED and lowers the deal's cached total in the same transaction.

Every check runs before the first write, so a rejected request leaves
the deal and its commissions untouched. The deal row is locked for the
duration of the transaction: two requests for the same deal serialize,
and the second one sees the first one's credit.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.commission import Commission, CommissionStatus
from src.models.company import Company
from src.models.deal import AdminApproval, Deal
from src.models.lead_share import LeadShare
from src.models.system_log import LogType
from src.services.commission import CommissionDataError, get_commission_rows, total_from_rows
from src.services.credit_window import CreditWindowState, as_utc, compute_status
from src.utils.system_log import log_event

logger = logging.getLogger(__name__)


class CreditRejection(str, Enum):
    """Why a credit-back request was refused."""
    DEAL_NOT_FOUND = "deal_not_found"
    DEAL_NOT_APPROVED = "deal_not_approved"
    COMPANY_NOT_ASSIGNED = "company_not_assigned"
    NOT_SHARED = "not_shared"
    WINDOW_EXPIRED = "window_expired"
    ALREADY_CREDITED = "already_credited"


@dataclass(frozen=True)
class CreditResult:
    commission: Optional[Commission] = None
    rejection: Optional[CreditRejection] = None
    window: Optional[CreditWindowState] = None
    total_commission: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


async def _find_share(db: AsyncSession, deal_id: int, company_name: str) -> Optional[LeadShare]:
    result = await db.execute(
        select(LeadShare)
        .join(Company, LeadShare.company_id == Company.id)
        .where(
            LeadShare.deal_id == deal_id,
            Company.name == company_name,
        )
    )
    return result.scalar_one_or_none()


async def request_credit_back(
    db: AsyncSession,
    deal_id: int,
    company_name: str,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
    source: str = "api",
) -> CreditResult:
    """Record that a company credits back its lead on a deal.

    Args:
        db: Database session (the caller commits)
        deal_id: Deal being disputed
        company_name: Company requesting the credit
        reason: Free-text reason from the company
        now: Request time, defaults to the current UTC time
        source: Origin recorded in the system log

    Returns:
        CreditResult with the updated Commission, or a rejection

    Raises:
        CommissionDataError: the deal is approved and the company is
            assigned, but no commission row exists for it.
    """
    now = as_utc(now) if now else datetime.now(timezone.utc)

    deal = (
        await db.execute(
            select(Deal).where(Deal.id == deal_id).with_for_update()
        )
    ).scalar_one_or_none()

    if not deal:
        return CreditResult(rejection=CreditRejection.DEAL_NOT_FOUND)

    if deal.admin_approval != AdminApproval.APPROVED:
        return CreditResult(rejection=CreditRejection.DEAL_NOT_APPROVED)

    if company_name not in deal.assigned_companies():
        return CreditResult(rejection=CreditRejection.COMPANY_NOT_ASSIGNED)

    commission = (
        await db.execute(
            select(Commission)
            .where(
                Commission.deal_id == deal_id,
                Commission.company_name == company_name,
            )
            .with_for_update()
        )
    ).scalar_one_or_none()

    if commission is None:
        raise CommissionDataError(
            f"Deal {deal_id} is approved but has no commission row for '{company_name}'"
        )

    if commission.credited_back:
        return CreditResult(
            commission=commission,
            rejection=CreditRejection.ALREADY_CREDITED,
            total_commission=deal.total_commission,
        )

    share = await _find_share(db, deal_id, company_name)
    if share is None:
        return CreditResult(rejection=CreditRejection.NOT_SHARED)

    window = compute_status(share.credit_window_expires, now)
    if not window.is_open:
        logger.info(f"Credit for deal {deal_id} by {company_name} refused: window closed")
        return CreditResult(
            commission=commission,
            rejection=CreditRejection.WINDOW_EXPIRED,
            window=window,
            total_commission=deal.total_commission,
        )

    previous_total = deal.total_commission

    commission.credited_back = True
    commission.credited_at = now
    commission.credit_reason = reason
    commission.status = CommissionStatus.CREDITED
    await db.flush()

    rows = await get_commission_rows(db, deal_id)
    deal.total_commission = total_from_rows(deal.base_bonus or 0, rows)

    log_event(
        db,
        type=LogType.CREDIT_BACK,
        source=source,
        deal_id=deal_id,
        message=f"{company_name} credited deal {deal_id}",
        data={
            "company_name": company_name,
            "reason": reason,
            "amount": commission.lead_type_amount,
            "previous_total": previous_total,
            "new_total": deal.total_commission,
            "days_remaining": window.days_remaining,
        },
    )
    await db.flush()

    logger.info(
        f"Deal {deal_id} credited by {company_name}: total {previous_total} -> {deal.total_commission}"
    )
    return CreditResult(
        commission=commission,
        window=window,
        total_commission=deal.total_commission,
    )
