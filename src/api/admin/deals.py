"""Admin deals API endpoints."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.db import get_db
from src.models import MAX_COMPANY_SLOTS, AdminApproval, Deal, LogType
from src.schemas.deal import (
    ApprovalRequest,
    BreakdownItemResponse,
    CommissionCalculationResponse,
    CommissionLineResponse,
    CommissionRowResponse,
    CompanyAssignmentIn,
    DealImportRequest,
    DealListResponse,
    DealResponse,
)
from src.services.approval import ApprovalError, decide_approval, recalculate
from src.services.commission import (
    CommissionDataError,
    CommissionResult,
    calculate_for_deal,
    format_sek,
    validate_deal_for_commission,
)
from src.utils.system_log import log_event

router = APIRouter(prefix="/deals")


async def _load_deal(db: AsyncSession, deal_id: int) -> Deal:
    """Deal with commissions and shares freshly loaded, or 404."""
    result = await db.execute(
        select(Deal)
        .options(
            selectinload(Deal.commissions),
            selectinload(Deal.lead_shares),
        )
        .where(Deal.id == deal_id)
        .execution_options(populate_existing=True)
    )
    deal = result.scalar_one_or_none()

    if not deal:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )
    return deal


def _deal_response(deal: Deal) -> DealResponse:
    return DealResponse(
        id=deal.id,
        title=deal.title,
        opener=deal.opener,
        contact_person=deal.contact_person,
        company_pool=deal.company_pool,
        deal_created=deal.deal_created,
        companies=[
            CompanyAssignmentIn(name=name, lead_type=lead_type)
            for name, lead_type in deal.company_slots()
            if name and lead_type
        ],
        admin_approval=deal.admin_approval,
        approval_decided_at=deal.approval_decided_at,
        base_bonus=deal.base_bonus,
        total_commission=deal.total_commission,
        shared_at=deal.shared_at,
        credited_companies=[c.company_name for c in deal.commissions if c.credited_back],
        commissions=[CommissionRowResponse.model_validate(c) for c in deal.commissions],
        share_count=len(deal.lead_shares),
        created_at=deal.created_at,
        updated_at=deal.updated_at,
    )


def _calculation_response(
    deal: Deal,
    result: Optional[CommissionResult],
    errors: list[str],
) -> CommissionCalculationResponse:
    if result is None:
        return CommissionCalculationResponse(
            deal_id=deal.id,
            is_eligible=False,
            validation_errors=errors,
            calculated_at=datetime.now(timezone.utc),
        )
    return CommissionCalculationResponse(
        deal_id=deal.id,
        is_eligible=True,
        base_bonus=result.base_bonus,
        total_commission=result.total_commission,
        total_formatted=format_sek(result.total_commission or 0),
        lines=[CommissionLineResponse.model_validate(line) for line in result.lines],
        breakdown=[BreakdownItemResponse.model_validate(item) for item in result.breakdown],
        calculated_at=datetime.now(timezone.utc),
    )


@router.get("/list", response_model=DealListResponse)
async def list_deals(
    db: AsyncSession = Depends(get_db),
    approval: Optional[AdminApproval] = Query(None, alias="admin_approval"),
    opener: Optional[str] = Query(None),
    company_name: Optional[str] = Query(None),
    unshared: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    """List deals with filters."""
    query = select(Deal).options(
        selectinload(Deal.commissions),
        selectinload(Deal.lead_shares),
    )

    if approval:
        query = query.where(Deal.admin_approval == approval)

    if opener:
        query = query.where(Deal.opener == opener)

    if company_name:
        query = query.where(
            or_(
                Deal.company1 == company_name,
                Deal.company2 == company_name,
                Deal.company3 == company_name,
                Deal.company4 == company_name,
            )
        )

    if unshared:
        query = query.where(~Deal.lead_shares.any())

    count_query = select(func.count()).select_from(query.subquery())
    total = await db.scalar(count_query)

    query = query.order_by(Deal.deal_created.desc(), Deal.id.desc())
    query = query.offset((page - 1) * per_page).limit(per_page)

    result = await db.execute(query)
    deals = result.scalars().all()

    return DealListResponse(
        items=[_deal_response(deal) for deal in deals],
        total=total or 0,
        page=page,
        per_page=per_page,
        pages=(total + per_page - 1) // per_page if total else 0,
    )


@router.post("", response_model=DealResponse)
async def import_deal(
    data: DealImportRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create or update a deal from the call-center import.

    Only pending deals can be updated; a decided deal is frozen.
    """
    deal = await db.get(Deal, data.id)

    if deal and deal.admin_approval != AdminApproval.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Deal {data.id} is already {deal.admin_approval.value} and cannot be re-imported",
        )

    created = deal is None
    if created:
        deal = Deal(id=data.id, admin_approval=AdminApproval.PENDING)
        db.add(deal)

    deal.opener = data.opener
    deal.title = data.title
    deal.contact_person = data.contact_person
    deal.phone_number = data.phone_number
    deal.street_address = data.street_address
    deal.company_pool = data.company_pool
    deal.notes = data.notes
    deal.deal_created = data.deal_created

    slots = list(data.companies) + [None] * (MAX_COMPANY_SLOTS - len(data.companies))
    for index, assignment in enumerate(slots, start=1):
        setattr(deal, f"company{index}", assignment.name if assignment else None)
        setattr(deal, f"company{index}_lead_type", assignment.lead_type if assignment else None)

    log_event(
        db,
        type=LogType.DEAL_IMPORT,
        source="api",
        deal_id=data.id,
        message=f"Deal {data.id} {'imported' if created else 'updated'}",
        data={"opener": data.opener, "companies": [c.name for c in data.companies]},
    )

    await db.commit()
    return _deal_response(await _load_deal(db, data.id))


@router.get("/{deal_id}/data", response_model=DealResponse)
async def get_deal(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get full deal details."""
    return _deal_response(await _load_deal(db, deal_id))


@router.post("/{deal_id}/approval", response_model=DealResponse)
async def decide_deal(
    deal_id: int,
    data: ApprovalRequest,
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending deal."""
    deal = await _load_deal(db, deal_id)

    try:
        await decide_approval(db, deal, data.decision)
    except ApprovalError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except CommissionDataError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    await db.commit()
    return _deal_response(await _load_deal(db, deal_id))


@router.get("/{deal_id}/commission", response_model=CommissionCalculationResponse)
async def preview_commission(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Calculate a deal's commission without storing it."""
    deal = await _load_deal(db, deal_id)

    errors = validate_deal_for_commission(deal)
    if errors:
        return _calculation_response(deal, None, errors)

    try:
        result = await calculate_for_deal(db, deal)
    except CommissionDataError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    return _calculation_response(deal, result, [])


@router.post("/{deal_id}/commission", response_model=CommissionCalculationResponse)
async def recalculate_commission(
    deal_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Recalculate and store a deal's commission."""
    deal = await _load_deal(db, deal_id)

    errors = validate_deal_for_commission(deal)
    if errors:
        return _calculation_response(deal, None, errors)

    try:
        result = await recalculate(db, deal)
    except CommissionDataError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    await db.commit()
    return _calculation_response(deal, result, [])
