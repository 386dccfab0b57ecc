"""
Hours Balance Service

Monthly view of the hours balance of workers, and hours to work of
sectors. A closed month shows the stored pay; an open one is drafted on
the fly for the single worker.

Sectors are the current sector of each worker. A contract ending within
the month is drafted like any other month.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Protocol

from engines.schemas.draft_pay import (
    HoursBalanceDetail,
    PayQuery,
    PayRecord,
    ScheduledEvent,
    SectorHoursToWork,
    Worker,
    WorkerEvents,
)
from engines.services.calendar import Calendar
from engines.services.contracts import get_contract_for_range, get_contract_month_info
from engines.services.draft_pay import PayDataSource, compute_worker_draft_pay, get_previous_month_pay
from engines.services.period import filter_absences_for_contract, get_pay_from_absences
from engines.services.transport import DistanceCache

logger = logging.getLogger(__name__)


class WorkerNotFoundError(LookupError):
    """Worker is not part of the company."""


class HoursBalanceSource(PayDataSource, Protocol):
    """Read access to stored pays and sector members, on top of the draft pay data."""

    async def get_pay(self, worker_id: str, month: str) -> PayRecord | None:
        """Stored pay of a worker for a month (MM-YYYY)."""
        ...

    async def get_worker(self, worker_id: str, end_date: datetime) -> Worker | None:
        """Worker with contracts and the stored pay of the month before `end_date`."""
        ...

    async def get_sector_workers(self, sectors: Sequence[str]) -> list[Worker]: ...


def get_worker_sectors(sector: str | None) -> list[str]:
    return [sector] if sector else []


async def draft_hours_balance_detail(
    source: HoursBalanceSource,
    worker: Worker,
    query: PayQuery,
    calendar: Calendar,
    today: date,
) -> HoursBalanceDetail:
    """Draft pay of one worker for an open month."""
    contract = get_contract_for_range(worker.contracts, query.start_date, query.end_date)
    if contract is None:
        raise ValueError(f"Worker {worker.id} has no contract in {query.month}")

    company, surcharges, known_matrices = await asyncio.gather(
        source.get_company(),
        source.get_surcharges(),
        source.get_distance_matrices(),
    )
    distances = DistanceCache(source, known_matrices)

    events_by_worker = await source.get_events_to_pay(query.start_date, query.end_date, [worker.id])
    prev_pay_diffs = await get_previous_month_pay([worker], query, source, surcharges, distances, calendar, today)
    draft = await compute_worker_draft_pay(
        worker,
        contract,
        events_by_worker.get(worker.id) or WorkerEvents(),
        prev_pay_diffs.get(worker.id),
        company,
        query,
        distances,
        surcharges,
        calendar,
    )

    first_contract_month = query.start_date <= contract.start_date
    return HoursBalanceDetail(
        **draft.model_dump(),
        sectors=get_worker_sectors(worker.sector),
        counter_and_diff_relevant=worker.prev_pay is not None or first_contract_month,
    )


async def get_hours_balance_detail(
    source: HoursBalanceSource,
    worker_id: str,
    month: str,
    calendar: Calendar,
    today: date | None = None,
) -> HoursBalanceDetail:
    """Hours balance of a worker for a month (MM-YYYY)."""
    query = PayQuery.for_month(month)

    stored = await source.get_pay(worker_id, query.month)
    if stored is not None:
        return HoursBalanceDetail(
            **stored.model_dump(),
            sectors=get_worker_sectors(stored.sector),
            counter_and_diff_relevant=True,
        )

    worker = await source.get_worker(worker_id, query.end_date)
    if worker is None:
        raise WorkerNotFoundError(f"Worker {worker_id} not found")

    return await draft_hours_balance_detail(source, worker, query, calendar, today or date.today())


async def get_hours_balance_detail_by_sector(
    source: HoursBalanceSource,
    sectors: Sequence[str],
    month: str,
    calendar: Calendar,
    today: date | None = None,
) -> list[HoursBalanceDetail]:
    """Hours balance of the workers of the sectors having a contract in the month."""
    query = PayQuery.for_month(month)
    workers = await source.get_sector_workers(sectors)

    details = []
    for worker in workers:
        if get_contract_for_range(worker.contracts, query.start_date, query.end_date) is None:
            continue
        details.append(await get_hours_balance_detail(source, worker.id, query.month, calendar, today))

    logger.debug(f"{len(details)} hours balance details for sectors {', '.join(sectors)} in {query.month}")
    return details


def compute_hours_to_work(
    workers: Sequence[Worker],
    absences_by_worker: Mapping[str, Sequence[ScheduledEvent]],
    query: PayQuery,
    calendar: Calendar,
) -> float:
    """
    Contract hours of the month, less holidays and absences, summed over
    every contract of the workers in force during the month.
    """
    contract_hours = 0.0
    holidays_hours = 0.0
    absences_hours = 0.0
    for worker in workers:
        absences = absences_by_worker.get(worker.id) or []
        for contract in worker.contracts:
            if contract.start_date > query.end_date:
                continue
            if contract.end_date is not None and contract.end_date < query.start_date:
                continue

            info = get_contract_month_info(contract, query, calendar)
            contract_hours += info.contract_hours
            holidays_hours += info.holidays_hours

            contract_absences = filter_absences_for_contract(absences, contract)
            if contract_absences:
                absences_hours += get_pay_from_absences(contract_absences, contract, query, calendar)

    return max(contract_hours - holidays_hours - absences_hours, 0)


async def get_hours_to_work_by_sector(
    source: HoursBalanceSource,
    sectors: Sequence[str],
    month: str,
    calendar: Calendar,
) -> list[SectorHoursToWork]:
    """Hours to work of each sector for a month (MM-YYYY)."""
    query = PayQuery.for_month(month)
    sectors = list(dict.fromkeys(sectors))

    workers = await source.get_sector_workers(sectors)
    events_by_worker = (
        await source.get_events_to_pay(query.start_date, query.end_date, [worker.id for worker in workers])
        if workers
        else {}
    )
    absences_by_worker = {worker_id: events.absences for worker_id, events in events_by_worker.items()}

    return [
        SectorHoursToWork(
            sector=sector,
            hours_to_work=compute_hours_to_work(
                [worker for worker in workers if worker.sector == sector], absences_by_worker, query, calendar
            ),
        )
        for sector in sectors
    ]
