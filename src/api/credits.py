"""
Credit-back endpoint used by partner company integrations.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.schemas.lead_share import CreditRequest, CreditResponse
from src.services.commission import CommissionDataError
from src.services.credits import CreditRejection, request_credit_back

router = APIRouter(prefix="/credits", tags=["Credits"])


@router.post("", response_model=CreditResponse)
async def request_credit(
    data: CreditRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Credit back a company's lead on a deal.

    Business rejections (window closed, not shared, already credited,
    ...) are returned with success=false rather than as errors.
    """
    try:
        result = await request_credit_back(
            db,
            deal_id=data.deal_id,
            company_name=data.company_name,
            reason=data.reason,
        )
    except CommissionDataError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    if result.rejection == CreditRejection.DEAL_NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )

    response = CreditResponse(
        success=result.ok,
        deal_id=data.deal_id,
        company_name=data.company_name,
        rejection=result.rejection.value if result.rejection else None,
        days_remaining=result.window.days_remaining if result.window else None,
        credited_at=result.commission.credited_at if result.ok else None,
        total_commission=result.total_commission,
    )

    if result.ok:
        await db.commit()
    return response
