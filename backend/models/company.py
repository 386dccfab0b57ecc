"""
Company Model

Multi-tenant root entity for CarePay.
All planning and pay data is scoped to a company.
"""

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from backend.models.worker import Worker


class Company(TimestampMixin, Base):
    """
    Home-care company.

    Holds the HR configuration used by the pay: public transport
    subsidies by department, mileage allowance and flat monthly fees.
    """

    __tablename__ = "companies"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # HR configuration
    transport_subs: Mapped[list | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Monthly transport pass price by department: [{'department': '75', 'price': 75.2}]",
    )
    amount_per_km: Mapped[float | None] = mapped_column(
        nullable=True,
        comment="Mileage allowance for private transport",
    )
    fee_amount: Mapped[float | None] = mapped_column(
        nullable=True,
        comment="Flat monthly fees refunded to workers",
    )

    # Relationships
    workers: Mapped[list["Worker"]] = relationship(
        back_populates="company",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Company {self.name}>"
