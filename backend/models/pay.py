"""
Pay Model

Monthly pay of a worker, stored once the month is closed. The stored pay
of a month is the reference the next draft pay diffs against.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class Pay(TimestampMixin, Base):
    """Pay of a worker for one month."""

    __tablename__ = "pays"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    worker_id: Mapped[UUID] = mapped_column(
        ForeignKey("workers.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Period
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="MM-YYYY",
    )
    start_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime] = mapped_column(nullable=False)

    # Contract
    contract_hours: Mapped[float] = mapped_column(default=0.0)
    holidays_hours: Mapped[float] = mapped_column(default=0.0)
    absences_hours: Mapped[float] = mapped_column(default=0.0)
    hours_to_work: Mapped[float] = mapped_column(default=0.0)

    # Worked hours
    worked_hours: Mapped[float] = mapped_column(default=0.0)
    internal_hours: Mapped[float] = mapped_column(default=0.0)
    paid_transport_hours: Mapped[float] = mapped_column(default=0.0)
    paid_km: Mapped[float] = mapped_column(default=0.0)
    not_surcharged_and_not_exempt: Mapped[float] = mapped_column(default=0.0)
    surcharged_and_not_exempt: Mapped[float] = mapped_column(default=0.0)
    surcharged_and_not_exempt_details: Mapped[list] = mapped_column(
        JSONB,
        default=list,
        nullable=False,
        comment="[{'plan_id': ..., 'plan_name': ..., 'sunday': {'hours': 2, 'percentage': 25}}]",
    )
    not_surcharged_and_exempt: Mapped[float] = mapped_column(default=0.0)
    surcharged_and_exempt: Mapped[float] = mapped_column(default=0.0)
    surcharged_and_exempt_details: Mapped[list] = mapped_column(
        JSONB,
        default=list,
        nullable=False,
    )

    # Balance
    hours_balance: Mapped[float] = mapped_column(default=0.0)
    hours_counter: Mapped[float] = mapped_column(default=0.0)
    overtime_hours: Mapped[float] = mapped_column(default=0.0)
    additional_hours: Mapped[float] = mapped_column(default=0.0)

    # Amounts
    bonus: Mapped[float] = mapped_column(default=0.0)
    mutual: Mapped[bool] = mapped_column(default=True)
    transport: Mapped[float] = mapped_column(default=0.0)
    other_fees: Mapped[float] = mapped_column(default=0.0)

    diff: Mapped[dict | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Corrections of the month before, paid with this month",
    )

    __table_args__ = (
        UniqueConstraint("worker_id", "month", name="uq_pay_worker_month"),
        Index("ix_pays_company_month", "company_id", "month"),
    )

    def __repr__(self) -> str:
        return f"<Pay {self.worker_id} {self.month}>"
