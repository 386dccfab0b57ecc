"""
Working Stats Service

Worked hours against contractual hours to work over a week, used by the
planning to spot under- and over-booked workers.
"""

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Protocol

from engines.schemas.draft_pay import DistanceMatrix, PayQuery, Worker, WorkerEvents, WorkingStats
from engines.services.calendar import Calendar
from engines.services.contracts import get_contract_for_range, get_contract_week_info
from engines.services.period import get_pay_from_absences, get_pay_from_events
from engines.services.transport import DistanceCache, DistanceLookup


class WorkingStatsSource(DistanceLookup, Protocol):
    """Read access to the planning of selected workers."""

    async def get_workers(self, worker_ids: Sequence[str]) -> list[Worker]: ...

    async def get_events_to_pay(
        self, start_date: datetime, end_date: datetime, worker_ids: Sequence[str]
    ) -> dict[str, WorkerEvents]: ...

    async def get_distance_matrices(self) -> list[DistanceMatrix]: ...


async def compute_working_stats(
    workers: Sequence[Worker],
    events_by_worker: Mapping[str, WorkerEvents],
    query: PayQuery,
    distances: DistanceCache,
    calendar: Calendar,
) -> dict[str, WorkingStats]:
    """Working stats of the workers having a contract during the query."""
    stats: dict[str, WorkingStats] = {}
    for worker in workers:
        contract = get_contract_for_range(worker.contracts, query.start_date, query.end_date)
        if contract is None:
            continue

        events_to_pay = events_by_worker.get(worker.id) or WorkerEvents()
        contract_info = get_contract_week_info(contract, query, calendar)
        hours = await get_pay_from_events(events_to_pay.events, worker, distances, [], query, calendar)
        absences_hours = get_pay_from_absences(events_to_pay.absences, contract, query, calendar)

        stats[worker.id] = WorkingStats(
            worked_hours=hours.worked_hours,
            hours_to_work=max(contract_info.contract_hours - contract_info.holidays_hours - absences_hours, 0),
        )

    return stats


async def get_working_stats(
    source: WorkingStatsSource,
    worker_ids: Sequence[str],
    start_date: date,
    end_date: date,
    calendar: Calendar,
) -> dict[str, WorkingStats]:
    """Working stats of the given workers over whole days."""
    query = PayQuery.for_days(start_date, end_date)

    workers = await source.get_workers(worker_ids)
    if not workers:
        return {}

    events_by_worker = await source.get_events_to_pay(query.start_date, query.end_date, worker_ids)
    distances = DistanceCache(source, await source.get_distance_matrices())

    return await compute_working_stats(workers, events_by_worker, query, distances, calendar)
