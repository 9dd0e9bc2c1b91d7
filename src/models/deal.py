"""
Deal model for booked sales appointments.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.commission import Commission
    from src.models.lead_share import LeadShare

MAX_COMPANY_SLOTS = 4


class AdminApproval(str, Enum):
    """Admin review decision for a deal."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeadType(str, Enum):
    """What a partner company receives for a deal."""
    OFFERT = "OFFERT"            # Quote request
    PLATSBESOK = "PLATSBESOK"    # Site visit


def _lead_type_column() -> Mapped[Optional[LeadType]]:
    return mapped_column(
        SQLAlchemyEnum(
            LeadType,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
    )


class Deal(Base, TimestampMixin):
    """
    A booked appointment imported from the call-center platform.

    Ids come from the external system and are never generated here.
    Up to four companies can be assigned, each with a lead type.
    total_commission and base_bonus are cached results of the
    commission calculator and stay NULL while the deal is pending.
    """

    __tablename__ = "deals"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
    )

    title: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    opener: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Display name of the salesperson who booked the deal",
    )
    contact_person: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    phone_number: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    street_address: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    company_pool: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    deal_created: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Booking time in the source system",
    )

    # Company assignment slots
    company1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    company1_lead_type: Mapped[Optional[LeadType]] = _lead_type_column()
    company2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    company2_lead_type: Mapped[Optional[LeadType]] = _lead_type_column()
    company3: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    company3_lead_type: Mapped[Optional[LeadType]] = _lead_type_column()
    company4: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    company4_lead_type: Mapped[Optional[LeadType]] = _lead_type_column()

    # Review
    admin_approval: Mapped[AdminApproval] = mapped_column(
        SQLAlchemyEnum(
            AdminApproval,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=AdminApproval.PENDING,
        nullable=False,
        index=True,
    )
    approval_decided_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Cached commission (whole SEK)
    total_commission: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    base_bonus: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    # First time the lead was shared with any company
    shared_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    commissions: Mapped[List["Commission"]] = relationship(
        "Commission",
        back_populates="deal",
        order_by="Commission.id",
    )
    lead_shares: Mapped[List["LeadShare"]] = relationship(
        "LeadShare",
        back_populates="deal",
        order_by="LeadShare.id",
    )

    def company_slots(self) -> list[tuple[Optional[str], Optional[LeadType]]]:
        """Raw (company, lead type) pairs for all four slots, in order."""
        return [
            (self.company1, self.company1_lead_type),
            (self.company2, self.company2_lead_type),
            (self.company3, self.company3_lead_type),
            (self.company4, self.company4_lead_type),
        ]

    def assigned_companies(self) -> list[str]:
        """Names of companies in non-empty slots."""
        return [name for name, _ in self.company_slots() if name]

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, opener='{self.opener}', approval={self.admin_approval})>"
