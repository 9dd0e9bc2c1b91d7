"""
Deal schemas for import, review and commission output.

Approval and lead type values are the upper-case enum values only;
any other spelling is rejected at the boundary.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from src.models.commission import CommissionStatus
from src.models.deal import MAX_COMPANY_SLOTS, AdminApproval, LeadType


class CompanyAssignmentIn(BaseModel):
    """One company slot on an imported deal."""

    name: str = Field(..., min_length=1, max_length=255)
    lead_type: LeadType


class DealImportRequest(BaseModel):
    """Deal as received from the call-center import."""

    id: int = Field(..., gt=0)
    opener: str = Field(..., min_length=1, max_length=100)
    title: Optional[str] = Field(None, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    street_address: Optional[str] = Field(None, max_length=255)
    company_pool: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=4000)
    deal_created: Optional[datetime] = None
    companies: List[CompanyAssignmentIn] = Field(default_factory=list, max_length=MAX_COMPANY_SLOTS)

    @field_validator("companies")
    @classmethod
    def unique_companies(cls, v: List[CompanyAssignmentIn]) -> List[CompanyAssignmentIn]:
        names = [c.name for c in v]
        if len(names) != len(set(names)):
            raise ValueError("A company can only be assigned once per deal")
        return v


class ApprovalRequest(BaseModel):
    """Admin decision on a pending deal."""

    decision: AdminApproval

    @field_validator("decision")
    @classmethod
    def not_pending(cls, v: AdminApproval) -> AdminApproval:
        if v == AdminApproval.PENDING:
            raise ValueError("decision must be APPROVED or REJECTED")
        return v


class CommissionRowResponse(BaseModel):
    """Stored Commission row."""

    id: int
    company_name: str
    lead_type: LeadType
    lead_type_amount: int
    is_base_included: bool
    credited_back: bool
    credited_at: Optional[datetime]
    credit_reason: Optional[str]
    status: CommissionStatus

    model_config = {"from_attributes": True}


class BreakdownItemResponse(BaseModel):
    type: str
    amount: int
    description: str
    company_name: Optional[str] = None

    model_config = {"from_attributes": True}


class CommissionLineResponse(BaseModel):
    company_name: str
    lead_type: LeadType
    lead_type_amount: int
    credited_back: bool
    status: CommissionStatus

    model_config = {"from_attributes": True}


class CommissionCalculationResponse(BaseModel):
    """Result of a commission preview or recalculation."""

    deal_id: int
    is_eligible: bool
    validation_errors: List[str] = []
    base_bonus: Optional[int] = None
    total_commission: Optional[int] = None
    total_formatted: Optional[str] = None
    lines: List[CommissionLineResponse] = []
    breakdown: List[BreakdownItemResponse] = []
    calculated_at: datetime


class DealResponse(BaseModel):
    """Deal with cached commission and derived credit view."""

    id: int
    title: Optional[str]
    opener: str
    contact_person: Optional[str]
    company_pool: Optional[str]
    deal_created: Optional[datetime]
    companies: List[CompanyAssignmentIn]
    admin_approval: AdminApproval
    approval_decided_at: Optional[datetime]
    base_bonus: Optional[int]
    total_commission: Optional[int]
    shared_at: Optional[datetime]
    credited_companies: List[str] = []
    commissions: List[CommissionRowResponse] = []
    share_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime]


class DealListResponse(BaseModel):
    """Paginated deal list."""

    items: List[DealResponse]
    total: int
    page: int
    per_page: int
    pages: int
