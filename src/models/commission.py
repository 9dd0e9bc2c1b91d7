"""
Commission model - one row per (deal, company) on an approved deal.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import BaseModel
from src.models.deal import LeadType

if TYPE_CHECKING:
    from src.models.deal import Deal


class CommissionStatus(str, Enum):
    """Lifecycle of a single company fee."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CREDITED = "CREDITED"
    REJECTED = "REJECTED"


class Commission(BaseModel):
    """
    Fee owed to the opener for one company on one deal.

    lead_type_amount is copied from the commission rules when the row
    is created, so later rule changes never alter past commissions.
    credited_back is the only record of a credit; the list of credited
    companies for a deal is always derived from these rows.
    """

    __tablename__ = "commissions"
    __table_args__ = (
        UniqueConstraint("deal_id", "company_name", name="uq_commissions_deal_company"),
    )

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id"),
        nullable=False,
        index=True,
    )
    company_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    lead_type: Mapped[LeadType] = mapped_column(
        SQLAlchemyEnum(
            LeadType,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    lead_type_amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Fee in whole SEK at creation time",
    )
    is_base_included: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Always false: the base bonus is tracked once per deal",
    )

    # Credit-back
    credited_back: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    credited_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    credit_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    status: Mapped[CommissionStatus] = mapped_column(
        SQLAlchemyEnum(
            CommissionStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=CommissionStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Relationships
    deal: Mapped["Deal"] = relationship(
        "Deal",
        back_populates="commissions",
    )

    def __repr__(self) -> str:
        return (
            f"<Commission(deal_id={self.deal_id}, company='{self.company_name}', "
            f"amount={self.lead_type_amount}, status={self.status})>"
        )
