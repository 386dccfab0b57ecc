"""
Worker Model

Care workers (auxiliaries) paid by the company.
"""

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from backend.models.company import Company
    from backend.models.contract import Contract


class Worker(TimestampMixin, Base):
    """
    Care worker record.

    Transport type and home zip code drive the paid transport and the
    public transport refund.
    """

    __tablename__ = "workers"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Identity
    firstname: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="",
    )
    lastname: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    sector: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Sector the worker belongs to",
    )

    # Transport
    transport_type: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
        comment="public_transport|private_transport|company_transport",
    )
    transport_invoice_link: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Link to the uploaded transport pass invoice",
    )
    zip_code: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
    )

    has_mutual_fund: Mapped[bool] = mapped_column(
        default=False,
        comment="Whether the worker has their own mutual fund",
    )

    # Relationships
    company: Mapped["Company"] = relationship(
        back_populates="workers",
    )
    contracts: Mapped[list["Contract"]] = relationship(
        back_populates="worker",
        cascade="all, delete-orphan",
        order_by="Contract.start_date",
    )

    __table_args__ = (Index("ix_workers_company_id", "company_id"),)

    def __repr__(self) -> str:
        return f"<Worker {self.firstname} {self.lastname}>"
