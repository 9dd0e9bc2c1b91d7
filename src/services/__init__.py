"""Business logic services."""

from src.services.alerts import list_expiring_alerts, record_credit_notification
from src.services.approval import ApprovalError, decide_approval, recalculate
from src.services.commission import CommissionDataError, calculate_commission
from src.services.credit_window import CreditWindowStatus, compute_status
from src.services.credits import CreditRejection, request_credit_back
from src.services.lead_sharing import ShareRejection, share_lead

__all__ = [
    "calculate_commission",
    "CommissionDataError",
    "decide_approval",
    "recalculate",
    "ApprovalError",
    "compute_status",
    "CreditWindowStatus",
    "share_lead",
    "ShareRejection",
    "request_credit_back",
    "CreditRejection",
    "list_expiring_alerts",
    "record_credit_notification",
]
