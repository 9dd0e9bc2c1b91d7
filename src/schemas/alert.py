"""Credit window alert schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.services.credit_window import CreditWindowStatus


class AlertCompanyResponse(BaseModel):
    company_id: int
    name: str
    email: Optional[str]
    shared_at: datetime
    credit_window_expires: datetime
    days_remaining: int
    status: CreditWindowStatus

    model_config = {"from_attributes": True}


class CreditAlertResponse(BaseModel):
    deal_id: int
    deal_title: Optional[str]
    opener: str
    companies: List[AlertCompanyResponse]
    has_credits: bool
    credit_window_expires: datetime
    days_remaining: int
    status: CreditWindowStatus
    urgency: str

    model_config = {"from_attributes": True}


class AlertListResponse(BaseModel):
    alerts: List[CreditAlertResponse]
    summary: dict[str, int]


class NotificationLogResponse(BaseModel):
    id: int
    source: str
    message: str
    data: Optional[dict]
    created_at: datetime

    model_config = {"from_attributes": True}
