"""
Contract Model

Employment contracts of workers, with their dated versions.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from backend.models.worker import Worker


class Contract(TimestampMixin, Base):
    """Employment contract of a worker."""

    __tablename__ = "contracts"

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

    status: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="company_contract",
        comment="company_contract|customer_contract",
    )
    start_date: Mapped[datetime] = mapped_column(
        nullable=False,
    )
    end_date: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )
    versions: Mapped[list] = mapped_column(
        JSONB,
        default=list,
        nullable=False,
        comment="Dated versions: [{'start_date': ..., 'end_date': ..., 'weekly_hours': 35}]",
    )

    # Relationships
    worker: Mapped["Worker"] = relationship(
        back_populates="contracts",
    )

    __table_args__ = (
        Index("ix_contracts_worker_id", "worker_id"),
        Index("ix_contracts_company_status", "company_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Contract {self.id} ({self.status})>"
