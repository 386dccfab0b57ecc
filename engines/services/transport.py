"""
Transport Time Calculator

Paid trip between two consecutive events of a worker.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Protocol

from engines.schemas.draft_pay import (
    DistanceMatrix,
    PaidTransport,
    ScheduledEvent,
    TransportType,
    TravelMode,
    Worker,
)
from engines.services.calendar import minutes_between

logger = logging.getLogger(__name__)

# A break longer than the trip by more than this is not fully paid
TRANSPORT_TOLERANCE_MINUTES = 15

DistanceKey = tuple[str, str, TravelMode]


class DistanceLookup(Protocol):
    """Distance/duration lookup between two addresses."""

    async def get_or_create_distance_matrix(
        self, origins: str, destinations: str, mode: TravelMode
    ) -> DistanceMatrix | None: ...


class DistanceCache:
    """
    Distance matrices known during one draft pay run.

    Keys are written once and never invalidated, so concurrent workers can
    share the cache. Concurrent misses on the same key share one lookup.
    A lookup without result is cached as a zero trip.
    """

    def __init__(self, lookup: DistanceLookup, known: Iterable[DistanceMatrix] = ()):
        self.lookup = lookup
        self._matrices: dict[DistanceKey, DistanceMatrix] = {}
        self._pending: dict[DistanceKey, asyncio.Task] = {}
        for matrix in known:
            self._matrices.setdefault((matrix.origins, matrix.destinations, matrix.mode), matrix)

    def __len__(self) -> int:
        return len(self._matrices)

    async def _fetch(self, key: DistanceKey) -> DistanceMatrix:
        origins, destinations, mode = key
        try:
            matrix = await self.lookup.get_or_create_distance_matrix(origins, destinations, mode)
            if matrix is None:
                logger.debug(f"No distance matrix for {mode.value} trip {origins!r} -> {destinations!r}")
                matrix = DistanceMatrix(
                    origins=origins, destinations=destinations, mode=mode, duration=0, distance=0
                )
            return self._matrices.setdefault(key, matrix)
        finally:
            self._pending.pop(key, None)

    async def get_transport_info(
        self, origins: str | None, destinations: str | None, mode: TravelMode | None
    ) -> PaidTransport:
        """Trip duration (minutes) and distance (km) between two addresses."""
        if not origins or not destinations or not mode:
            return PaidTransport()

        key = (origins, destinations, mode)
        matrix = self._matrices.get(key)
        if matrix is None:
            task = self._pending.get(key)
            if task is None:
                task = asyncio.create_task(self._fetch(key))
                self._pending[key] = task
            matrix = await task

        return PaidTransport(duration=matrix.duration / 60, distance=matrix.distance / 1000)


def get_travel_mode(worker: Worker) -> TravelMode | None:
    """Travel mode of a worker, None when no transport is declared."""
    if worker.transport_type is None:
        return None
    if worker.transport_type == TransportType.PUBLIC_TRANSPORT:
        return TravelMode.TRANSIT
    return TravelMode.DRIVING


def pick_transport_duration(transport_duration: float, break_duration: float) -> float:
    """
    Paid trip duration given the looked-up trip and the break between events.

    The trip duration is paid when the break is too short for it, or longer
    than the trip plus the tolerance. Otherwise the break itself is paid.
    There is no lower tolerance band.
    """
    if transport_duration > break_duration:
        return transport_duration
    if break_duration > transport_duration + TRANSPORT_TOLERANCE_MINUTES:
        return transport_duration
    return break_duration


async def get_paid_transport_info(
    event: ScheduledEvent,
    prev_event: ScheduledEvent | None,
    worker: Worker,
    distances: DistanceCache,
) -> PaidTransport:
    """Paid trip from `prev_event` to `event`, zero when it cannot be determined."""
    if prev_event is None or prev_event.has_fixed_service or event.has_fixed_service:
        return PaidTransport()

    mode = get_travel_mode(worker)
    if not prev_event.address or not event.address or mode is None:
        return PaidTransport()

    transport = await distances.get_transport_info(prev_event.address, event.address, mode)
    break_duration = minutes_between(prev_event.end_date, event.start_date)

    return PaidTransport(
        duration=pick_transport_duration(transport.duration, break_duration),
        distance=transport.distance,
    )
