"""Admin lead sharing API endpoints."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.schemas.lead_share import (
    BulkShareRequest,
    BulkShareResponse,
    LeadShareListResponse,
    LeadShareResponse,
    RejectedShareResponse,
    ShareLeadRequest,
    ShareResultResponse,
)
from src.services.credit_window import CreditWindowStatus
from src.services.lead_sharing import (
    ShareRejection,
    ShareResult,
    ShareStatus,
    acknowledge_share,
    list_share_statuses,
    share_lead,
    share_leads,
)

router = APIRouter(prefix="/lead-sharing")


def _share_response(item: ShareStatus) -> LeadShareResponse:
    share = item.share
    return LeadShareResponse(
        id=share.id,
        deal_id=share.deal_id,
        company_id=share.company_id,
        company_name=share.company.name,
        shared_at=share.shared_at,
        credit_window_expires=share.credit_window_expires,
        sharing_method=share.sharing_method,
        acknowledged=share.acknowledged,
        days_remaining=item.window.days_remaining,
        credit_status=item.window.status,
        has_credited=item.has_credited,
    )


def _result_response(result: ShareResult) -> ShareResultResponse:
    return ShareResultResponse(
        deal_id=result.deal_id,
        success=result.rejection is None and result.shared_count > 0,
        shared_count=result.shared_count,
        share_ids=[share.id for share in result.shares],
        rejected=[
            RejectedShareResponse(
                company_id=r.company_id,
                company_name=r.company_name,
                reason=r.reason.value,
            )
            for r in result.rejected
        ],
        error=result.rejection.value if result.rejection else None,
        credit_window_expires=result.credit_window_expires,
    )


@router.post("", response_model=ShareResultResponse)
async def share_deal(
    data: ShareLeadRequest,
    db: AsyncSession = Depends(get_db),
):
    """Share a lead with companies and start their credit windows."""
    result = await share_lead(
        db,
        deal_id=data.deal_id,
        company_ids=data.company_ids,
        sharing_method=data.sharing_method,
        notes=data.notes,
    )

    if result.rejection is not None:
        raise HTTPException(
            status_code=(
                status.HTTP_404_NOT_FOUND
                if result.rejection == ShareRejection.DEAL_NOT_FOUND
                else status.HTTP_409_CONFLICT
            ),
            detail=result.rejection.value,
        )

    response = _result_response(result)
    await db.commit()
    return response


@router.post("/bulk", response_model=BulkShareResponse)
async def bulk_share(
    data: BulkShareRequest,
    db: AsyncSession = Depends(get_db),
):
    """Share several leads with the same companies."""
    results = await share_leads(
        db,
        deal_ids=data.deal_ids,
        company_ids=data.company_ids,
        sharing_method=data.sharing_method,
        notes=data.notes,
    )
    responses = [_result_response(r) for r in results]
    await db.commit()

    successful = sum(1 for r in responses if r.success)
    return BulkShareResponse(
        results=responses,
        total=len(responses),
        successful=successful,
        failed=len(responses) - successful,
    )


@router.get("", response_model=LeadShareListResponse)
async def list_shares(
    db: AsyncSession = Depends(get_db),
    deal_id: Optional[int] = Query(None),
    company_id: Optional[int] = Query(None),
    credit_status: Optional[CreditWindowStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """Lead sharing history with credit window status."""
    now = datetime.now(timezone.utc)
    items = await list_share_statuses(db, now, deal_id=deal_id, company_id=company_id)

    summary = {s.value: 0 for s in CreditWindowStatus}
    for item in items:
        summary[item.window.status.value] += 1
    summary["total"] = len(items)

    if credit_status is not None:
        items = [item for item in items if item.window.status == credit_status]

    return LeadShareListResponse(
        items=[_share_response(item) for item in items[offset:offset + limit]],
        total=len(items),
        summary=summary,
    )


@router.post("/{share_id}/acknowledge", response_model=LeadShareResponse)
async def acknowledge(
    share_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Mark a share as acknowledged by the receiving company."""
    share = await acknowledge_share(db, share_id)
    if share is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead share not found",
        )
    await db.commit()

    items = await list_share_statuses(
        db,
        datetime.now(timezone.utc),
        deal_id=share.deal_id,
        company_id=share.company_id,
    )
    return _share_response(items[0])
