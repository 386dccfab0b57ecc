"""
Event Model

Planning events: interventions, internal hours and absences of workers.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from backend.models.service import Service


class Event(TimestampMixin, Base):
    """
    Planning event.

    Cancelled interventions stay in the planning; they are paid to the
    worker only when `cancel_paid` is set.
    """

    __tablename__ = "events"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    worker_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("workers.id", ondelete="SET NULL"),
        nullable=True,
        comment="Unassigned events have no worker",
    )

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="intervention|internal_hour|absence",
    )
    start_date: Mapped[datetime] = mapped_column(
        nullable=False,
    )
    end_date: Mapped[datetime] = mapped_column(
        nullable=False,
    )
    address: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Full address where the event takes place",
    )

    # Interventions
    service_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("services.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_cancelled: Mapped[bool] = mapped_column(default=False)
    cancel_paid: Mapped[bool] = mapped_column(
        default=False,
        comment="Cancelled intervention still paid to the worker",
    )

    # Absences
    absence_nature: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
        comment="daily|hourly",
    )

    # Relationships
    service: Mapped["Service | None"] = relationship(
        lazy="joined",
    )

    __table_args__ = (
        Index("ix_events_company_dates", "company_id", "start_date", "end_date"),
        Index("ix_events_worker_id", "worker_id"),
    )

    def __repr__(self) -> str:
        return f"<Event {self.type} {self.start_date:%Y-%m-%d %H:%M}>"
