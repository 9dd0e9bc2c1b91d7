"""
SystemLog model for tracking business events.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Integer, JSON, String, Text, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class LogType(str, Enum):
    """Types of logged events."""
    DEAL_IMPORT = "deal_import"
    DEAL_APPROVAL = "deal_approval"
    COMMISSION_CALCULATION = "commission_calculation"
    LEAD_SHARING = "lead_sharing"
    CREDIT_BACK = "credit_back"
    CREDIT_NOTIFICATION = "credit_notification"


class SystemLog(Base):
    """
    Append-only log of commission and credit events.

    Rows are written in the same transaction as the change they
    describe, so a rolled-back credit leaves no log entry either.
    """

    __tablename__ = "system_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[LogType] = mapped_column(
        SQLAlchemyEnum(
            LogType,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    source: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Origin of the event (admin, api, scheduler, ...)",
    )
    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    deal_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        index=True,
    )
    data: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<SystemLog(id={self.id}, type={self.type}, deal_id={self.deal_id})>"
