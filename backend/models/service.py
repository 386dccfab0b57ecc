"""
Service Model

Services subscribed by customers and performed during interventions.
"""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class Service(TimestampMixin, Base):
    """Customer service with dated versions carrying the surcharge plan."""

    __tablename__ = "services"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    nature: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="hourly",
        comment="hourly|fixed",
    )
    versions: Mapped[list] = mapped_column(
        JSONB,
        default=list,
        nullable=False,
        comment="Dated versions: [{'start_date': ..., 'surcharge_id': ..., 'exempt_from_charges': false}]",
    )

    __table_args__ = (Index("ix_services_company_id", "company_id"),)

    def __repr__(self) -> str:
        return f"<Service {self.name} ({self.nature})>"
