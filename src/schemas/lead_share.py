"""Lead sharing and credit-back schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.models.lead_share import SharingMethod
from src.services.credit_window import CreditWindowStatus


class ShareLeadRequest(BaseModel):
    """Share one deal with companies."""

    deal_id: int = Field(..., gt=0)
    company_ids: List[int] = Field(..., min_length=1)
    sharing_method: SharingMethod
    notes: Optional[str] = Field(None, max_length=2000)


class BulkShareRequest(BaseModel):
    """Share several deals with the same companies."""

    deal_ids: List[int] = Field(..., min_length=1)
    company_ids: List[int] = Field(..., min_length=1)
    sharing_method: SharingMethod
    notes: Optional[str] = Field(None, max_length=2000)


class RejectedShareResponse(BaseModel):
    company_id: int
    company_name: Optional[str] = None
    reason: str


class LeadShareResponse(BaseModel):
    """Lead share with its computed credit window state."""

    id: int
    deal_id: int
    company_id: int
    company_name: str
    shared_at: datetime
    credit_window_expires: datetime
    sharing_method: SharingMethod
    acknowledged: bool
    days_remaining: int
    credit_status: CreditWindowStatus
    has_credited: bool = False


class ShareResultResponse(BaseModel):
    deal_id: int
    success: bool
    shared_count: int
    share_ids: List[int] = []
    rejected: List[RejectedShareResponse] = []
    error: Optional[str] = None
    credit_window_expires: Optional[datetime] = None


class BulkShareResponse(BaseModel):
    results: List[ShareResultResponse]
    total: int
    successful: int
    failed: int


class LeadShareListResponse(BaseModel):
    items: List[LeadShareResponse]
    total: int
    summary: dict[str, int]


class CreditRequest(BaseModel):
    """A partner company disputes a lead."""

    deal_id: int = Field(..., gt=0)
    company_name: str = Field(..., min_length=1, max_length=255)
    reason: Optional[str] = Field(None, max_length=2000)


class CreditResponse(BaseModel):
    success: bool
    deal_id: int
    company_name: str
    rejection: Optional[str] = None
    days_remaining: Optional[int] = None
    credited_at: Optional[datetime] = None
    total_commission: Optional[int] = None
