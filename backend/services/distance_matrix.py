"""
Distance Matrix Service

Stored trips between addresses, completed from the maps provider on a miss.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.distance_matrix import DistanceMatrix as DistanceMatrixRow
from engines.schemas.draft_pay import DistanceMatrix, TravelMode
from integrations.base import DistanceMatrixProvider

logger = logging.getLogger(__name__)


def to_distance_matrix(row: DistanceMatrixRow) -> DistanceMatrix:
    return DistanceMatrix(
        origins=row.origins,
        destinations=row.destinations,
        mode=TravelMode(row.mode),
        duration=row.duration,
        distance=row.distance,
    )


async def get_distance_matrices(db: AsyncSession, company_id: UUID) -> list[DistanceMatrix]:
    """All trips already known by the company."""
    result = await db.execute(select(DistanceMatrixRow).where(DistanceMatrixRow.company_id == company_id))
    return [to_distance_matrix(row) for row in result.scalars().all()]


async def get_or_create_distance_matrix(
    db: AsyncSession,
    company_id: UUID,
    origins: str,
    destinations: str,
    mode: TravelMode,
    provider: DistanceMatrixProvider | None,
) -> DistanceMatrix | None:
    """
    Stored trip between two addresses, fetched and stored on a miss.

    Returns None when no provider is configured or the provider has no route.
    """
    result = await db.execute(
        select(DistanceMatrixRow).where(
            DistanceMatrixRow.company_id == company_id,
            DistanceMatrixRow.origins == origins,
            DistanceMatrixRow.destinations == destinations,
            DistanceMatrixRow.mode == mode.value,
        )
    )
    stored = result.scalar_one_or_none()
    if stored is not None:
        return to_distance_matrix(stored)

    if provider is None:
        logger.warning("No distance matrix provider configured, trip is not paid")
        return None

    found = await provider.get_distance_matrix(origins, destinations, mode)
    if found is None:
        return None

    row = DistanceMatrixRow(
        company_id=company_id,
        origins=origins,
        destinations=destinations,
        mode=mode.value,
        duration=found.duration,
        distance=found.distance,
    )
    db.add(row)
    await db.flush()

    return to_distance_matrix(row)
