"""Pydantic schemas for request/response validation."""

from src.schemas.alert import (
    AlertCompanyResponse,
    AlertListResponse,
    CreditAlertResponse,
    NotificationLogResponse,
)
from src.schemas.deal import (
    ApprovalRequest,
    CommissionCalculationResponse,
    CommissionRowResponse,
    CompanyAssignmentIn,
    DealImportRequest,
    DealListResponse,
    DealResponse,
)
from src.schemas.lead_share import (
    BulkShareRequest,
    BulkShareResponse,
    CreditRequest,
    CreditResponse,
    LeadShareListResponse,
    LeadShareResponse,
    ShareLeadRequest,
    ShareResultResponse,
)

__all__ = [
    # Deal
    "DealImportRequest",
    "CompanyAssignmentIn",
    "ApprovalRequest",
    "DealResponse",
    "DealListResponse",
    "CommissionRowResponse",
    "CommissionCalculationResponse",
    # Lead sharing
    "ShareLeadRequest",
    "BulkShareRequest",
    "ShareResultResponse",
    "BulkShareResponse",
    "LeadShareResponse",
    "LeadShareListResponse",
    "CreditRequest",
    "CreditResponse",
    # Alerts
    "AlertCompanyResponse",
    "CreditAlertResponse",
    "AlertListResponse",
    "NotificationLogResponse",
]
