"""
Declarative base and shared columns for the provision tracker tables.

All timestamps are stored as timezone-aware UTC values.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Metadata root for commission, deal and lead sharing tables."""


class TimestampMixin:
    """Row creation and last modification time (UTC)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )


class BaseModel(Base, TimestampMixin):
    """
    Abstract model with a generated integer id and timestamps.

    Used by companies, commissions and lead shares. Deals keep the id
    assigned by the call-center platform and commission rules are keyed
    by rule name, so those inherit Base and TimestampMixin directly.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
