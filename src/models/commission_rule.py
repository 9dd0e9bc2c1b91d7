"""
CommissionRule model - fixed SEK amounts used by the commission calculator.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin


class RuleName(str, Enum):
    """Known commission rules."""
    BASE_BONUS = "BASE_BONUS"
    OFFERT_RATE = "OFFERT_RATE"
    PLATSBESOK_RATE = "PLATSBESOK_RATE"


class CommissionRule(Base, TimestampMixin):
    """
    One amount per rule name.

    The name is the primary key, so there is exactly one active rule
    per name. Rules are read-only for the calculator; amounts are
    copied onto Commission rows when they are created.
    """

    __tablename__ = "commission_rules"

    name: Mapped[RuleName] = mapped_column(
        SQLAlchemyEnum(
            RuleName,
            values_callable=lambda x: [e.value for e in x],
        ),
        primary_key=True,
    )
    value: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Amount in whole SEK",
    )
    description: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<CommissionRule(name={self.name}, value={self.value})>"
