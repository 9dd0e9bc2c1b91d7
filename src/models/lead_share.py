"""
LeadShare model - disclosure of a deal to one partner company.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import BaseModel

if TYPE_CHECKING:
    from src.models.company import Company
    from src.models.deal import Deal


class SharingMethod(str, Enum):
    """How the lead was handed over."""
    EMAIL = "email"
    API = "api"
    MANUAL = "manual"


class LeadShare(BaseModel):
    """
    A deal shared with one company.

    Sharing starts the 14-day credit window. credit_window_expires is
    set once at creation and never recomputed; only the acknowledgement
    fields change afterwards.
    """

    __tablename__ = "lead_shares"
    __table_args__ = (
        UniqueConstraint("deal_id", "company_id", name="uq_lead_shares_deal_company"),
    )

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id"),
        nullable=False,
        index=True,
    )
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id"),
        nullable=False,
        index=True,
    )
    shared_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    credit_window_expires: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    sharing_method: Mapped[SharingMethod] = mapped_column(
        SQLAlchemyEnum(
            SharingMethod,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    email_sent_to: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    acknowledged: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    deal: Mapped["Deal"] = relationship(
        "Deal",
        back_populates="lead_shares",
    )
    company: Mapped["Company"] = relationship("Company")

    def __repr__(self) -> str:
        return (
            f"<LeadShare(deal_id={self.deal_id}, company_id={self.company_id}, "
            f"expires={self.credit_window_expires})>"
        )
