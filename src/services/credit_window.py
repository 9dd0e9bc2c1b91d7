"""
Credit window state for shared leads.

A partner company may credit back a lead for 14 days after it was
shared. The state of a share is never stored; it is computed here from
the expiry timestamp and the current instant:

- ACTIVE:   window open, more than 2 days remaining
- EXPIRING: window open, 1-2 days remaining
- EXPIRED:  now >= expiry (an exact 14 days counts as expired)
- CREDITED: the company credited the lead while the window was open

EXPIRED and CREDITED are terminal.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.models.lead_share import LeadShare

CREDIT_WINDOW_DAYS = 14
EXPIRING_THRESHOLD_DAYS = 2

_ONE_DAY = timedelta(days=1)


class CreditWindowStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    CREDITED = "credited"


@dataclass(frozen=True)
class CreditWindowState:
    days_remaining: int
    status: CreditWindowStatus

    @property
    def is_open(self) -> bool:
        """Whether a credit-back can still be accepted."""
        return self.status in (CreditWindowStatus.ACTIVE, CreditWindowStatus.EXPIRING)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def credit_window_expiry(shared_at: datetime) -> datetime:
    return as_utc(shared_at) + timedelta(days=CREDIT_WINDOW_DAYS)


def days_remaining(expires_at: datetime, now: datetime) -> int:
    """Whole days left, rounded up, never negative."""
    delta = as_utc(expires_at) - as_utc(now)
    if delta <= timedelta(0):
        return 0
    days, rest = divmod(delta, _ONE_DAY)
    return days + (1 if rest else 0)


def compute_status(
    expires_at: datetime,
    now: datetime,
    credited: bool = False,
) -> CreditWindowState:
    """
    Classify a credit window at a given instant.

    Args:
        expires_at: LeadShare.credit_window_expires
        now: Instant to evaluate at
        credited: Whether the company already credited this deal

    Returns:
        CreditWindowState with days_remaining and status
    """
    remaining = days_remaining(expires_at, now)

    if credited:
        status = CreditWindowStatus.CREDITED
    elif as_utc(now) >= as_utc(expires_at):
        status = CreditWindowStatus.EXPIRED
    elif remaining <= EXPIRING_THRESHOLD_DAYS:
        status = CreditWindowStatus.EXPIRING
    else:
        status = CreditWindowStatus.ACTIVE

    return CreditWindowState(days_remaining=remaining, status=status)


def get_credit_window_status(
    lead_share: "LeadShare",
    now: datetime,
    credited: bool = False,
) -> CreditWindowState:
    """compute_status for a LeadShare row."""
    return compute_status(lead_share.credit_window_expires, now, credited)
