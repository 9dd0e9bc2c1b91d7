"""
Tests for sharing approved leads with partner companies.

Covers:
- Credit window starts at share time
- One share per (deal, company)
- Deals must be approved and companies assigned
- Share listing with credit window status
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from src.models import AdminApproval, LeadShare, LeadType, LogType, SharingMethod, SystemLog
from src.services.approval import decide_approval
from src.services.credit_window import CreditWindowStatus
from src.services.credits import request_credit_back
from src.services.lead_sharing import (
    ShareRejection,
    acknowledge_share,
    list_share_statuses,
    share_lead,
    share_leads,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


async def _approved_deal(db, make_deal, companies, deal_id=100001):
    deal = make_deal(
        deal_id=deal_id,
        companies=[(c.name, LeadType.PLATSBESOK) for c in companies],
    )
    db.add(deal)
    await db.flush()
    await decide_approval(db, deal, AdminApproval.APPROVED, now=NOW)
    return deal


# ── share_lead ───────────────────────────────────────────


class TestShareLead:
    @pytest.mark.asyncio
    async def test_share_starts_credit_window(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:2])

        result = await share_lead(
            db_session, deal.id, [c.id for c in companies[:2]], SharingMethod.EMAIL, now=NOW
        )

        assert result.rejection is None
        assert result.shared_count == 2
        assert result.credit_window_expires == NOW + timedelta(days=14)
        assert result.shares[0].email_sent_to == companies[0].contact_email
        assert deal.shared_at == NOW

    @pytest.mark.asyncio
    async def test_second_share_to_same_company_rejected(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:2])
        await share_lead(db_session, deal.id, [companies[0].id], SharingMethod.API, now=NOW)

        later = NOW + timedelta(days=3)
        result = await share_lead(
            db_session, deal.id, [companies[0].id, companies[1].id], SharingMethod.API, now=later
        )

        assert result.shared_count == 1
        assert result.shares[0].company_id == companies[1].id
        assert [r.reason for r in result.rejected] == [ShareRejection.ALREADY_SHARED]

        count = await db_session.scalar(
            select(func.count()).select_from(LeadShare).where(LeadShare.company_id == companies[0].id)
        )
        assert count == 1
        assert deal.shared_at == NOW

    @pytest.mark.asyncio
    async def test_first_share_window_not_extended(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:1])
        await share_lead(db_session, deal.id, [companies[0].id], SharingMethod.API, now=NOW)
        await share_lead(
            db_session, deal.id, [companies[0].id], SharingMethod.API, now=NOW + timedelta(days=5)
        )

        share = (await db_session.execute(select(LeadShare))).scalar_one()
        assert share.credit_window_expires.replace(tzinfo=timezone.utc) == NOW + timedelta(days=14)

    @pytest.mark.asyncio
    async def test_unassigned_company_rejected(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:1])

        result = await share_lead(db_session, deal.id, [companies[3].id], SharingMethod.MANUAL, now=NOW)

        assert result.shared_count == 0
        assert result.rejected[0].reason == ShareRejection.COMPANY_NOT_ASSIGNED
        assert result.rejected[0].company_name == companies[3].name

    @pytest.mark.asyncio
    async def test_unknown_company_rejected(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:1])
        result = await share_lead(db_session, deal.id, [9999], SharingMethod.MANUAL, now=NOW)
        assert result.rejected[0].reason == ShareRejection.COMPANY_NOT_FOUND

    @pytest.mark.asyncio
    async def test_pending_deal_cannot_be_shared(self, db_session, rules, companies, make_deal):
        deal = make_deal(companies=[(companies[0].name, LeadType.OFFERT)])
        db_session.add(deal)
        await db_session.flush()

        result = await share_lead(db_session, deal.id, [companies[0].id], SharingMethod.EMAIL, now=NOW)

        assert result.rejection == ShareRejection.DEAL_NOT_APPROVED
        assert result.shared_count == 0

    @pytest.mark.asyncio
    async def test_missing_deal(self, db_session, rules, companies):
        result = await share_lead(db_session, 424242, [companies[0].id], SharingMethod.EMAIL, now=NOW)
        assert result.rejection == ShareRejection.DEAL_NOT_FOUND

    @pytest.mark.asyncio
    async def test_share_is_logged(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:1])
        await share_lead(db_session, deal.id, [companies[0].id], SharingMethod.EMAIL, now=NOW)
        await db_session.flush()

        entries = (await db_session.execute(
            select(SystemLog).where(SystemLog.type == LogType.LEAD_SHARING)
        )).scalars().all()
        assert len(entries) == 1
        assert entries[0].deal_id == deal.id
        assert entries[0].data["company_name"] == companies[0].name

    @pytest.mark.asyncio
    async def test_bulk_share(self, db_session, rules, companies, make_deal):
        first = await _approved_deal(db_session, make_deal, companies[:1], deal_id=100001)
        second = await _approved_deal(db_session, make_deal, companies[1:2], deal_id=100002)

        results = await share_leads(
            db_session, [first.id, second.id], [companies[0].id], SharingMethod.EMAIL, now=NOW
        )

        assert [r.shared_count for r in results] == [1, 0]
        assert results[1].rejected[0].reason == ShareRejection.COMPANY_NOT_ASSIGNED


# ── Listing and acknowledgement ──────────────────────────


class TestShareStatuses:
    @pytest.mark.asyncio
    async def test_statuses_follow_clock(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:2])
        await share_lead(db_session, deal.id, [c.id for c in companies[:2]], SharingMethod.EMAIL, now=NOW)
        await request_credit_back(db_session, deal.id, companies[1].name, now=NOW + timedelta(days=1))

        items = await list_share_statuses(db_session, NOW + timedelta(days=13))
        by_company = {item.share.company.name: item for item in items}

        assert by_company[companies[0].name].window.status == CreditWindowStatus.EXPIRING
        assert by_company[companies[1].name].window.status == CreditWindowStatus.CREDITED
        assert by_company[companies[1].name].has_credited

    @pytest.mark.asyncio
    async def test_filter_by_status(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:1])
        await share_lead(db_session, deal.id, [companies[0].id], SharingMethod.EMAIL, now=NOW)

        expired = await list_share_statuses(
            db_session, NOW + timedelta(days=20), status=CreditWindowStatus.EXPIRED
        )
        active = await list_share_statuses(
            db_session, NOW + timedelta(days=20), status=CreditWindowStatus.ACTIVE
        )
        assert len(expired) == 1
        assert active == []

    @pytest.mark.asyncio
    async def test_acknowledge(self, db_session, rules, companies, make_deal):
        deal = await _approved_deal(db_session, make_deal, companies[:1])
        result = await share_lead(db_session, deal.id, [companies[0].id], SharingMethod.EMAIL, now=NOW)

        share = await acknowledge_share(db_session, result.shares[0].id, now=NOW + timedelta(hours=2))

        assert share.acknowledged
        assert share.acknowledged_at == NOW + timedelta(hours=2)
        assert await acknowledge_share(db_session, 9999) is None
