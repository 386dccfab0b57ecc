"""
Surcharge Model

Surcharge plans applied to services.
"""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class Surcharge(TimestampMixin, Base):
    """
    Surcharge plan.

    Percentages enable the matching surcharge when positive. Window times
    are stored as HH:MM strings.
    """

    __tablename__ = "surcharges"

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

    # Calendar surcharges
    saturday: Mapped[float | None] = mapped_column(nullable=True)
    sunday: Mapped[float | None] = mapped_column(nullable=True)
    public_holiday: Mapped[float | None] = mapped_column(nullable=True)
    first_of_may: Mapped[float | None] = mapped_column(nullable=True)
    twenty_fifth_of_december: Mapped[float | None] = mapped_column(nullable=True)

    # Clock-time windows
    evening: Mapped[float | None] = mapped_column(nullable=True)
    evening_start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    evening_end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    custom: Mapped[float | None] = mapped_column(nullable=True)
    custom_start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    custom_end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    __table_args__ = (Index("ix_surcharges_company_id", "company_id"),)

    def __repr__(self) -> str:
        return f"<Surcharge {self.name}>"
