"""
DistanceMatrix Model

Trips between addresses already looked up from the maps provider.
"""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class DistanceMatrix(TimestampMixin, Base):
    """Stored trip duration and distance between two addresses."""

    __tablename__ = "distance_matrices"

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    origins: Mapped[str] = mapped_column(String(500), nullable=False)
    destinations: Mapped[str] = mapped_column(String(500), nullable=False)
    mode: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="transit|driving",
    )
    duration: Mapped[float] = mapped_column(
        nullable=False,
        comment="Seconds",
    )
    distance: Mapped[float] = mapped_column(
        nullable=False,
        comment="Meters",
    )

    __table_args__ = (
        UniqueConstraint(
            "company_id",
            "origins",
            "destinations",
            "mode",
            name="uq_distance_matrix_trip",
        ),
    )

    def __repr__(self) -> str:
        return f"<DistanceMatrix {self.origins} -> {self.destinations} ({self.mode})>"
