"""
Admin review of imported deals.

The approval decision is made exactly once. Approving a deal creates
its commission rows; rejecting it fixes the commission at zero.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.deal import AdminApproval, Deal
from src.models.system_log import LogType
from src.services.commission import CommissionResult, calculate_for_deal, store_commission
from src.utils.system_log import log_event

logger = logging.getLogger(__name__)


class ApprovalError(ValueError):
    """The approval decision is not allowed for this deal."""


async def decide_approval(
    db: AsyncSession,
    deal: Deal,
    decision: AdminApproval,
    now: Optional[datetime] = None,
    source: str = "admin",
) -> CommissionResult:
    """Approve or reject a pending deal.

    Args:
        db: Database session (the caller commits)
        deal: Deal to decide on, loaded in this session
        decision: APPROVED or REJECTED
        now: Decision time, defaults to the current UTC time
        source: Origin recorded in the system log

    Returns:
        The commission calculated for the decided deal

    Raises:
        ApprovalError: the deal was already decided, or decision is PENDING
        CommissionDataError: approved deal has invalid company slots
    """
    decision = AdminApproval(decision)
    if decision == AdminApproval.PENDING:
        raise ApprovalError("Decision must be APPROVED or REJECTED")

    if deal.admin_approval != AdminApproval.PENDING:
        raise ApprovalError(
            f"Deal {deal.id} is already {AdminApproval(deal.admin_approval).value}"
        )

    deal.admin_approval = decision
    deal.approval_decided_at = now or datetime.now(timezone.utc)

    result = await calculate_for_deal(db, deal)
    await store_commission(db, deal, result)

    log_event(
        db,
        type=LogType.DEAL_APPROVAL,
        source=source,
        deal_id=deal.id,
        message=f"Deal {deal.id} {decision.value.lower()}",
        data={
            "decision": decision.value,
            "base_bonus": deal.base_bonus,
            "total_commission": deal.total_commission,
            "companies": [line.company_name for line in result.lines],
        },
    )

    logger.info(f"Deal {deal.id} {decision.value}: commission {deal.total_commission}")
    return result


async def recalculate(
    db: AsyncSession,
    deal: Deal,
    source: str = "api",
) -> CommissionResult:
    """Recalculate and store a deal's commission (idempotent)."""
    previous = deal.total_commission

    result = await calculate_for_deal(db, deal)
    await store_commission(db, deal, result)

    log_event(
        db,
        type=LogType.COMMISSION_CALCULATION,
        source=source,
        deal_id=deal.id,
        message=f"Commission calculated for deal {deal.id}",
        data={
            "previous_commission": previous,
            "new_commission": deal.total_commission,
            "breakdown": [
                {"type": item.type, "amount": item.amount, "company_name": item.company_name}
                for item in result.breakdown
            ],
        },
    )
    return result
