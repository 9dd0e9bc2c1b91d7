"""
Database models for the provision tracker.

All models are exported here for convenient imports:
    from src.models import Deal, Commission, LeadShare, etc.
"""

from src.models.base import Base, BaseModel, TimestampMixin
from src.models.commission import Commission, CommissionStatus
from src.models.commission_rule import CommissionRule, RuleName
from src.models.company import Company
from src.models.deal import MAX_COMPANY_SLOTS, AdminApproval, Deal, LeadType
from src.models.lead_share import LeadShare, SharingMethod
from src.models.system_log import LogType, SystemLog

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TimestampMixin",
    # Rules
    "CommissionRule",
    "RuleName",
    # Company
    "Company",
    # Deal
    "Deal",
    "AdminApproval",
    "LeadType",
    "MAX_COMPANY_SLOTS",
    # Commission
    "Commission",
    "CommissionStatus",
    # Lead sharing
    "LeadShare",
    "SharingMethod",
    # Logging
    "SystemLog",
    "LogType",
]
