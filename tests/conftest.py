"""
Pytest configuration and fixtures.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from src.models import (
    AdminApproval,
    Base,
    CommissionRule,
    Company,
    Deal,
    LeadType,
    RuleName,
)


# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

COMPANY_NAMES = [
    "Sol & Energi AB",
    "Nordic Solar",
    "Takvärme Sverige",
    "GreenRoof AB",
    "Solpanel Experten",
    "Energismart",
    "Klimatkraft",
]


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def rules(db_session):
    """Default commission rules: 100 base, 100 offert, 300 platsbesök."""
    db_session.add_all([
        CommissionRule(name=RuleName.BASE_BONUS, value=100),
        CommissionRule(name=RuleName.OFFERT_RATE, value=100),
        CommissionRule(name=RuleName.PLATSBESOK_RATE, value=300),
    ])
    await db_session.flush()


@pytest_asyncio.fixture
async def companies(db_session):
    """Seven active partner companies, ordered as COMPANY_NAMES."""
    rows = [
        Company(name=name, contact_email=f"leads{i}@example.se", active=True)
        for i, name in enumerate(COMPANY_NAMES, start=1)
    ]
    db_session.add_all(rows)
    await db_session.flush()
    return rows


def _make_deal(deal_id=100001, approval=AdminApproval.PENDING, companies=(), **kwargs):
    """Deal with companies given as (name, lead_type) pairs."""
    deal = Deal(
        id=deal_id,
        opener=kwargs.pop("opener", "Anna Svensson"),
        title=kwargs.pop("title", f"Solceller deal {deal_id}"),
        admin_approval=approval,
        **kwargs,
    )
    for index, (name, lead_type) in enumerate(companies, start=1):
        setattr(deal, f"company{index}", name)
        setattr(deal, f"company{index}_lead_type", LeadType(lead_type) if lead_type else None)
    return deal


@pytest.fixture
def make_deal():
    """Factory for unsaved deals."""
    return _make_deal


@pytest_asyncio.fixture
async def client(db_engine):
    """HTTP client bound to the app with the test database."""
    from src.db import get_db
    from src.main import app

    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
