"""
Company model for partner installation companies.
"""

from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import BaseModel


class Company(BaseModel):
    """
    A partner company that receives shared leads.

    Deals reference companies by name in their assignment slots;
    lead shares reference them by id.
    """

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    organisation_number: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Swedish organisationsnummer",
    )
    contact_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    contact_phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name='{self.name}')>"
