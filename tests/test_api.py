"""
HTTP endpoint tests.

Covers:
- Health check
- Deal import, approval and commission endpoints
- Lead sharing and credit-back requests
- Credit notification endpoints
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models import CommissionRule, RuleName


@pytest_asyncio.fixture
async def seeded(db_engine):
    """Commit default rules so every request session sees them."""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        session.add_all([
            CommissionRule(name=RuleName.BASE_BONUS, value=100),
            CommissionRule(name=RuleName.OFFERT_RATE, value=100),
            CommissionRule(name=RuleName.PLATSBESOK_RATE, value=300),
        ])
        await session.commit()


def _deal_payload(deal_id=100001, companies=None):
    return {
        "id": deal_id,
        "opener": "Anna Svensson",
        "title": "Solceller villa",
        "contact_person": "Per Olsson",
        "phone_number": "070-123 45 67",
        "street_address": "Storgatan 1, Uppsala",
        "company_pool": "Solceller",
        "companies": companies if companies is not None else [
            {"name": "Nordic Solar", "lead_type": "OFFERT"},
            {"name": "Energismart", "lead_type": "PLATSBESOK"},
        ],
    }


async def _create_companies(client):
    ids = {}
    for name in ("Nordic Solar", "Energismart", "Klimatkraft"):
        response = await client.post("/admin/companies", json={"name": name})
        assert response.status_code == 201
        ids[name] = response.json()["id"]
    return ids


async def _approved_deal(client, deal_id=100001):
    response = await client.post("/admin/deals", json=_deal_payload(deal_id))
    assert response.status_code == 200
    response = await client.post(f"/admin/deals/{deal_id}/approval", json={"decision": "APPROVED"})
    assert response.status_code == 200
    return response.json()


# ── Health ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "provision-tracker"}


@pytest.mark.asyncio
async def test_ready_with_rules_seeded(client, seeded):
    response = await client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "connected", "commission_rules": "ok"}


@pytest.mark.asyncio
async def test_not_ready_without_rules(client):
    response = await client.get("/api/health/ready")
    body = response.json()
    assert body["status"] == "not_ready"
    assert body["database"] == "connected"
    assert "Missing commission rules" in body["commission_rules"]


# ── Deals ────────────────────────────────────────────────


class TestDealEndpoints:
    @pytest.mark.asyncio
    async def test_import_creates_pending_deal(self, client, seeded):
        response = await client.post("/admin/deals", json=_deal_payload())

        assert response.status_code == 200
        body = response.json()
        assert body["admin_approval"] == "PENDING"
        assert body["total_commission"] is None
        assert [c["name"] for c in body["companies"]] == ["Nordic Solar", "Energismart"]

    @pytest.mark.asyncio
    async def test_import_rejects_five_companies(self, client, seeded):
        companies = [{"name": f"Company {i}", "lead_type": "OFFERT"} for i in range(5)]
        response = await client.post("/admin/deals", json=_deal_payload(companies=companies))
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_approval_stores_commission(self, client, seeded):
        body = await _approved_deal(client)

        assert body["admin_approval"] == "APPROVED"
        assert body["base_bonus"] == 100
        assert body["total_commission"] == 500
        assert len(body["commissions"]) == 2

    @pytest.mark.asyncio
    async def test_second_decision_conflicts(self, client, seeded):
        await _approved_deal(client)
        response = await client.post("/admin/deals/100001/approval", json={"decision": "REJECTED"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_decided_deal_cannot_be_reimported(self, client, seeded):
        await _approved_deal(client)
        response = await client.post("/admin/deals", json=_deal_payload())
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_commission_preview(self, client, seeded):
        await _approved_deal(client)

        response = await client.get("/admin/deals/100001/commission")

        assert response.status_code == 200
        body = response.json()
        assert body["is_eligible"] is True
        assert body["total_commission"] == 500
        assert body["total_formatted"] == "500 kr"
        assert [item["type"] for item in body["breakdown"]] == ["base_bonus", "offert", "platsbesok"]

    @pytest.mark.asyncio
    async def test_pending_deal_not_eligible(self, client, seeded):
        await client.post("/admin/deals", json=_deal_payload())
        response = await client.get("/admin/deals/100001/commission")
        body = response.json()
        assert body["is_eligible"] is False
        assert body["validation_errors"]

    @pytest.mark.asyncio
    async def test_unknown_deal(self, client, seeded):
        response = await client.get("/admin/deals/999/data")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_filters_by_approval(self, client, seeded):
        await _approved_deal(client, 100001)
        await client.post("/admin/deals", json=_deal_payload(100002))

        response = await client.get("/admin/deals/list", params={"admin_approval": "PENDING"})

        assert response.status_code == 200
        assert [d["id"] for d in response.json()["items"]] == [100002]


# ── Sharing and credits ──────────────────────────────────


class TestSharingAndCredits:
    @pytest.mark.asyncio
    async def test_share_then_credit(self, client, seeded):
        ids = await _create_companies(client)
        await _approved_deal(client)

        response = await client.post("/admin/lead-sharing", json={
            "deal_id": 100001,
            "company_ids": [ids["Nordic Solar"], ids["Energismart"]],
            "sharing_method": "email",
        })
        assert response.status_code == 200
        assert response.json()["shared_count"] == 2

        response = await client.post("/api/credits", json={
            "deal_id": 100001,
            "company_name": "Energismart",
            "reason": "Fel kontaktuppgifter",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["total_commission"] == 200
        assert body["days_remaining"] == 14

        deal = (await client.get("/admin/deals/100001/data")).json()
        assert deal["total_commission"] == 200
        assert deal["credited_companies"] == ["Energismart"]

    @pytest.mark.asyncio
    async def test_duplicate_credit_rejected(self, client, seeded):
        ids = await _create_companies(client)
        await _approved_deal(client)
        await client.post("/admin/lead-sharing", json={
            "deal_id": 100001,
            "company_ids": [ids["Nordic Solar"]],
            "sharing_method": "api",
        })

        payload = {"deal_id": 100001, "company_name": "Nordic Solar"}
        await client.post("/api/credits", json=payload)
        response = await client.post("/api/credits", json=payload)

        body = response.json()
        assert body["success"] is False
        assert body["rejection"] == "already_credited"

    @pytest.mark.asyncio
    async def test_credit_without_share(self, client, seeded):
        await _approved_deal(client)
        response = await client.post("/api/credits", json={"deal_id": 100001, "company_name": "Nordic Solar"})
        assert response.json()["rejection"] == "not_shared"

    @pytest.mark.asyncio
    async def test_credit_unknown_deal(self, client, seeded):
        response = await client.post("/api/credits", json={"deal_id": 5, "company_name": "Nordic Solar"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_share_pending_deal_conflicts(self, client, seeded):
        ids = await _create_companies(client)
        await client.post("/admin/deals", json=_deal_payload())

        response = await client.post("/admin/lead-sharing", json={
            "deal_id": 100001,
            "company_ids": [ids["Nordic Solar"]],
            "sharing_method": "email",
        })

        assert response.status_code == 409
        assert response.json()["detail"] == "deal_not_approved"

    @pytest.mark.asyncio
    async def test_share_listing(self, client, seeded):
        ids = await _create_companies(client)
        await _approved_deal(client)
        await client.post("/admin/lead-sharing", json={
            "deal_id": 100001,
            "company_ids": [ids["Nordic Solar"], ids["Klimatkraft"]],
            "sharing_method": "email",
        })

        response = await client.get("/admin/lead-sharing", params={"status": "active"})

        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["company_name"] == "Nordic Solar"
        assert body["items"][0]["days_remaining"] == 14
        assert body["summary"]["active"] == 1


# ── Credit notifications ─────────────────────────────────


class TestCreditNotifications:
    @pytest.mark.asyncio
    async def test_fresh_share_not_alerted(self, client, seeded):
        ids = await _create_companies(client)
        await _approved_deal(client)
        await client.post("/admin/lead-sharing", json={
            "deal_id": 100001,
            "company_ids": [ids["Nordic Solar"]],
            "sharing_method": "email",
        })

        response = await client.get("/admin/credit-notifications/alerts")

        assert response.status_code == 200
        assert response.json()["alerts"] == []

    @pytest.mark.asyncio
    async def test_manual_run_is_listed(self, client, seeded):
        response = await client.post("/admin/credit-notifications/run")
        assert response.status_code == 200
        assert response.json()["summary"]["total"] == 0

        response = await client.get("/admin/credit-notifications")
        notifications = response.json()["notifications"]
        assert len(notifications) == 1
        assert notifications[0]["source"] == "manual"
