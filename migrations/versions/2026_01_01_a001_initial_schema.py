"""Initial schema: companies, planning and pays

Revision ID: a001
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # === companies ===
    op.create_table(
        "companies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("transport_subs", postgresql.JSONB(), nullable=True),
        sa.Column("amount_per_km", sa.Float(), nullable=True),
        sa.Column("fee_amount", sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # === workers ===
    op.create_table(
        "workers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("firstname", sa.String(100), nullable=False, server_default=""),
        sa.Column("lastname", sa.String(100), nullable=False),
        sa.Column("sector", sa.String(100), nullable=True),
        sa.Column("transport_type", sa.String(30), nullable=True),
        sa.Column("transport_invoice_link", sa.String(500), nullable=True),
        sa.Column("zip_code", sa.String(10), nullable=True),
        sa.Column("has_mutual_fund", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "transport_type IN ('public_transport', 'private_transport', 'company_transport')",
            name="valid_transport_type",
        ),
    )
    op.create_index("ix_workers_company_id", "workers", ["company_id"])

    # === contracts ===
    op.create_table(
        "contracts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("worker_id", sa.Uuid(), sa.ForeignKey("workers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="company_contract"),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("versions", postgresql.JSONB(), nullable=False, server_default="[]"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("status IN ('company_contract', 'customer_contract')", name="valid_contract_status"),
    )
    op.create_index("ix_contracts_worker_id", "contracts", ["worker_id"])
    op.create_index("ix_contracts_company_status", "contracts", ["company_id", "status"])

    # === services ===
    op.create_table(
        "services",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("nature", sa.String(20), nullable=False, server_default="hourly"),
        sa.Column("versions", postgresql.JSONB(), nullable=False, server_default="[]"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("nature IN ('hourly', 'fixed')", name="valid_service_nature"),
    )
    op.create_index("ix_services_company_id", "services", ["company_id"])

    # === surcharges ===
    op.create_table(
        "surcharges",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("saturday", sa.Float(), nullable=True),
        sa.Column("sunday", sa.Float(), nullable=True),
        sa.Column("public_holiday", sa.Float(), nullable=True),
        sa.Column("first_of_may", sa.Float(), nullable=True),
        sa.Column("twenty_fifth_of_december", sa.Float(), nullable=True),
        sa.Column("evening", sa.Float(), nullable=True),
        sa.Column("evening_start_time", sa.String(5), nullable=True),
        sa.Column("evening_end_time", sa.String(5), nullable=True),
        sa.Column("custom", sa.Float(), nullable=True),
        sa.Column("custom_start_time", sa.String(5), nullable=True),
        sa.Column("custom_end_time", sa.String(5), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_surcharges_company_id", "surcharges", ["company_id"])

    # === events ===
    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("worker_id", sa.Uuid(), sa.ForeignKey("workers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("service_id", sa.Uuid(), sa.ForeignKey("services.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("cancel_paid", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("absence_nature", sa.String(10), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("type IN ('intervention', 'internal_hour', 'absence')", name="valid_event_type"),
        sa.CheckConstraint("end_date >= start_date", name="valid_event_dates"),
    )
    op.create_index("ix_events_company_dates", "events", ["company_id", "start_date", "end_date"])
    op.create_index("ix_events_worker_id", "events", ["worker_id"])

    # === distance_matrices ===
    op.create_table(
        "distance_matrices",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("origins", sa.String(500), nullable=False),
        sa.Column("destinations", sa.String(500), nullable=False),
        sa.Column("mode", sa.String(20), nullable=False),
        sa.Column("duration", sa.Float(), nullable=False, comment="Seconds"),
        sa.Column("distance", sa.Float(), nullable=False, comment="Meters"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "origins", "destinations", "mode", name="uq_distance_matrix_trip"),
    )

    # === pays ===
    op.create_table(
        "pays",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("worker_id", sa.Uuid(), sa.ForeignKey("workers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("month", sa.String(7), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        *[
            sa.Column(name, sa.Float(), nullable=False, server_default="0")
            for name in (
                "contract_hours",
                "holidays_hours",
                "absences_hours",
                "hours_to_work",
                "worked_hours",
                "internal_hours",
                "paid_transport_hours",
                "paid_km",
                "not_surcharged_and_not_exempt",
                "surcharged_and_not_exempt",
                "not_surcharged_and_exempt",
                "surcharged_and_exempt",
                "hours_balance",
                "hours_counter",
                "overtime_hours",
                "additional_hours",
                "bonus",
                "transport",
                "other_fees",
            )
        ],
        sa.Column("surcharged_and_not_exempt_details", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("surcharged_and_exempt_details", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("mutual", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("diff", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("worker_id", "month", name="uq_pay_worker_month"),
    )
    op.create_index("ix_pays_company_month", "pays", ["company_id", "month"])


def downgrade() -> None:
    op.drop_table("pays")
    op.drop_table("distance_matrices")
    op.drop_table("events")
    op.drop_table("surcharges")
    op.drop_table("services")
    op.drop_table("contracts")
    op.drop_table("workers")
    op.drop_table("companies")
