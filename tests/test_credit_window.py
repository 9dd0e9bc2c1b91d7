"""
Tests for credit window state.

Covers:
- Window expiry 14 days after sharing
- days_remaining rounding and clamping
- ACTIVE / EXPIRING / EXPIRED / CREDITED classification
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from src.services.credit_window import (
    CREDIT_WINDOW_DAYS,
    CreditWindowStatus,
    as_utc,
    compute_status,
    credit_window_expiry,
    days_remaining,
    get_credit_window_status,
)

SHARED_AT = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)
EXPIRES = SHARED_AT + timedelta(days=CREDIT_WINDOW_DAYS)


# ── credit_window_expiry ─────────────────────────────────


class TestCreditWindowExpiry:
    def test_fourteen_days_after_share(self):
        assert credit_window_expiry(SHARED_AT) == datetime(2026, 3, 16, 9, 30, tzinfo=timezone.utc)

    def test_naive_datetime_treated_as_utc(self):
        naive = datetime(2026, 3, 2, 9, 30)
        assert credit_window_expiry(naive) == EXPIRES

    def test_other_timezone_normalized(self):
        stockholm = timezone(timedelta(hours=1))
        shared = datetime(2026, 3, 2, 10, 30, tzinfo=stockholm)
        assert credit_window_expiry(shared) == EXPIRES
        assert credit_window_expiry(shared).tzinfo == timezone.utc

    def test_as_utc_keeps_instant(self):
        value = datetime(2026, 3, 2, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert as_utc(value) == datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


# ── days_remaining ───────────────────────────────────────


class TestDaysRemaining:
    def test_full_window_at_share_time(self):
        assert days_remaining(EXPIRES, SHARED_AT) == 14

    def test_partial_day_rounds_up(self):
        assert days_remaining(EXPIRES, SHARED_AT + timedelta(hours=1)) == 14
        assert days_remaining(EXPIRES, EXPIRES - timedelta(hours=30)) == 2

    def test_one_second_left(self):
        assert days_remaining(EXPIRES, EXPIRES - timedelta(seconds=1)) == 1

    def test_zero_at_expiry(self):
        assert days_remaining(EXPIRES, EXPIRES) == 0

    def test_never_negative(self):
        assert days_remaining(EXPIRES, EXPIRES + timedelta(days=5)) == 0


# ── compute_status ───────────────────────────────────────


class TestComputeStatus:
    def test_active_early_in_window(self):
        state = compute_status(EXPIRES, SHARED_AT + timedelta(days=1))
        assert state.status == CreditWindowStatus.ACTIVE
        assert state.days_remaining == 13
        assert state.is_open

    def test_active_with_three_days_left(self):
        state = compute_status(EXPIRES, EXPIRES - timedelta(days=3))
        assert state.status == CreditWindowStatus.ACTIVE

    def test_expiring_with_two_days_left(self):
        state = compute_status(EXPIRES, EXPIRES - timedelta(days=2))
        assert state.status == CreditWindowStatus.EXPIRING
        assert state.days_remaining == 2
        assert state.is_open

    def test_expiring_in_last_hour(self):
        state = compute_status(EXPIRES, EXPIRES - timedelta(minutes=30))
        assert state.status == CreditWindowStatus.EXPIRING
        assert state.days_remaining == 1

    def test_exactly_fourteen_days_is_expired(self):
        state = compute_status(EXPIRES, SHARED_AT + timedelta(days=14))
        assert state.status == CreditWindowStatus.EXPIRED
        assert state.days_remaining == 0
        assert not state.is_open

    def test_expired_after_window(self):
        state = compute_status(EXPIRES, EXPIRES + timedelta(days=1))
        assert state.status == CreditWindowStatus.EXPIRED

    def test_credited_overrides_window(self):
        open_state = compute_status(EXPIRES, SHARED_AT, credited=True)
        closed_state = compute_status(EXPIRES, EXPIRES + timedelta(days=1), credited=True)
        assert open_state.status == CreditWindowStatus.CREDITED
        assert closed_state.status == CreditWindowStatus.CREDITED
        assert not open_state.is_open

    def test_naive_stored_expiry(self):
        naive_expiry = EXPIRES.replace(tzinfo=None)
        state = compute_status(naive_expiry, EXPIRES - timedelta(days=5))
        assert state.status == CreditWindowStatus.ACTIVE
        assert state.days_remaining == 5

    def test_for_lead_share_row(self):
        share = SimpleNamespace(credit_window_expires=EXPIRES)
        state = get_credit_window_status(share, EXPIRES - timedelta(days=1))
        assert state.status == CreditWindowStatus.EXPIRING
