"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-03-02

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Shared by deals and commissions, so it is created once up front
lead_type = postgresql.ENUM("OFFERT", "PLATSBESOK", name="leadtype", create_type=False)


def upgrade() -> None:
    """Create all initial tables."""
    postgresql.ENUM("OFFERT", "PLATSBESOK", name="leadtype").create(op.get_bind(), checkfirst=True)

    # Commission rules table
    op.create_table(
        "commission_rules",
        sa.Column(
            "name",
            sa.Enum("BASE_BONUS", "OFFERT_RATE", "PLATSBESOK_RATE", name="rulename"),
            primary_key=True,
        ),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    # Companies table
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("organisation_number", sa.String(20), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_companies_name", "companies", ["name"], unique=True)

    # Deals table (ids come from the call-center platform)
    op.create_table(
        "deals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("opener", sa.String(100), nullable=False),
        sa.Column("contact_person", sa.String(255), nullable=True),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column("street_address", sa.String(255), nullable=True),
        sa.Column("company_pool", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("deal_created", sa.DateTime(timezone=True), nullable=True),
        sa.Column("company1", sa.String(255), nullable=True),
        sa.Column("company1_lead_type", lead_type, nullable=True),
        sa.Column("company2", sa.String(255), nullable=True),
        sa.Column("company2_lead_type", lead_type, nullable=True),
        sa.Column("company3", sa.String(255), nullable=True),
        sa.Column("company3_lead_type", lead_type, nullable=True),
        sa.Column("company4", sa.String(255), nullable=True),
        sa.Column("company4_lead_type", lead_type, nullable=True),
        sa.Column(
            "admin_approval",
            sa.Enum("PENDING", "APPROVED", "REJECTED", name="adminapproval"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("approval_decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_commission", sa.Integer(), nullable=True),
        sa.Column("base_bonus", sa.Integer(), nullable=True),
        sa.Column("shared_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_deals_opener", "deals", ["opener"])
    op.create_index("ix_deals_admin_approval", "deals", ["admin_approval"])

    # Commissions table
    op.create_table(
        "commissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id"), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("lead_type", lead_type, nullable=False),
        sa.Column("lead_type_amount", sa.Integer(), nullable=False),
        sa.Column("is_base_included", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("credited_back", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("credited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("credit_reason", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("PENDING", "APPROVED", "CREDITED", "REJECTED", name="commissionstatus"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("deal_id", "company_name", name="uq_commissions_deal_company"),
    )
    op.create_index("ix_commissions_deal_id", "commissions", ["deal_id"])
    op.create_index("ix_commissions_company_name", "commissions", ["company_name"])

    # Lead shares table
    op.create_table(
        "lead_shares",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id"), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("shared_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("credit_window_expires", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "sharing_method",
            sa.Enum("email", "api", "manual", name="sharingmethod"),
            nullable=False,
        ),
        sa.Column("email_sent_to", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("acknowledged", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("deal_id", "company_id", name="uq_lead_shares_deal_company"),
    )
    op.create_index("ix_lead_shares_deal_id", "lead_shares", ["deal_id"])
    op.create_index("ix_lead_shares_company_id", "lead_shares", ["company_id"])
    op.create_index("ix_lead_shares_credit_window_expires", "lead_shares", ["credit_window_expires"])

    # System logs table
    op.create_table(
        "system_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "type",
            sa.Enum(
                "deal_import", "deal_approval", "commission_calculation",
                "lead_sharing", "credit_back", "credit_notification",
                name="logtype",
            ),
            nullable=False,
        ),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("deal_id", sa.Integer(), nullable=True),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_system_logs_type", "system_logs", ["type"])
    op.create_index("ix_system_logs_deal_id", "system_logs", ["deal_id"])
    op.create_index("ix_system_logs_created_at", "system_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("system_logs")
    op.drop_table("lead_shares")
    op.drop_table("commissions")
    op.drop_table("deals")
    op.drop_table("companies")
    op.drop_table("commission_rules")

    # Drop enums
    op.execute("DROP TYPE IF EXISTS logtype")
    op.execute("DROP TYPE IF EXISTS sharingmethod")
    op.execute("DROP TYPE IF EXISTS commissionstatus")
    op.execute("DROP TYPE IF EXISTS adminapproval")
    op.execute("DROP TYPE IF EXISTS leadtype")
    op.execute("DROP TYPE IF EXISTS rulename")
