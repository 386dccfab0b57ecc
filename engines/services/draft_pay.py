"""
Draft Pay Orchestrator

Computes the draft pay of a batch of workers for a period:

1. Find the company contract active at the end of the period (workers
   without one are left out of the batch)
2. Recompute the previous closed month and diff it with its stored pay
3. Aggregate the paid hours and balance of the period
4. Assemble the pay record with the running hours counter

Workers are computed concurrently. They only share the per-run distance
cache, which is append-only.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from typing import Protocol

from engines.schemas.draft_pay import (
    Company,
    Contract,
    DistanceMatrix,
    PayQuery,
    PayRecord,
    PrevPayDiff,
    SurchargeRule,
    Worker,
    WorkerEvents,
)
from engines.services.calendar import Calendar
from engines.services.contracts import get_company_contract
from engines.services.pay_diff import compute_prev_pay_diff
from engines.services.period import compute_balance
from engines.services.transport import DistanceCache, DistanceLookup

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8


class PayDataSource(DistanceLookup, Protocol):
    """Read access to the data of one company needed by the draft pay."""

    async def get_workers_to_pay(self, end_date: datetime) -> list[Worker]:
        """Workers with a company contract on `end_date`, with contracts and previous month pay."""
        ...

    async def get_events_to_pay(
        self, start_date: datetime, end_date: datetime, worker_ids: Sequence[str]
    ) -> dict[str, WorkerEvents]: ...

    async def get_company(self) -> Company | None: ...

    async def get_surcharges(self) -> list[SurchargeRule]: ...

    async def get_distance_matrices(self) -> list[DistanceMatrix]: ...


def get_previous_month_query(query: PayQuery) -> PayQuery:
    """Whole calendar month before the query."""
    start = (query.start_date.date().replace(day=1) - timedelta(days=1)).replace(day=1)
    end = query.end_date.date().replace(day=1) - timedelta(days=1)
    return PayQuery(start_date=datetime.combine(start, time.min), end_date=datetime.combine(end, time.max))


async def compute_worker_draft_pay(
    worker: Worker,
    contract: Contract,
    events_to_pay: WorkerEvents,
    prev_pay_diff: PrevPayDiff | None,
    company: Company | None,
    query: PayQuery,
    distances: DistanceCache,
    surcharges: Sequence[SurchargeRule],
    calendar: Calendar,
) -> PayRecord:
    """Draft pay of one worker."""
    month_balance = await compute_balance(
        worker, contract, events_to_pay, company, query, distances, surcharges, calendar
    )

    prev_hours_counter = prev_pay_diff.hours_counter if prev_pay_diff else 0
    prev_hours_balance = prev_pay_diff.diff.hours_balance if prev_pay_diff and prev_pay_diff.diff else 0

    return PayRecord(
        **month_balance.model_dump(),
        worker_id=worker.id,
        worker=worker.identity,
        sector=worker.sector,
        start_date=max(query.start_date, contract.start_date),
        end_date=query.end_date,
        month=query.month,
        hours_counter=prev_hours_counter + prev_hours_balance + month_balance.hours_balance,
        mutual=not worker.has_mutual_fund,
        diff=prev_pay_diff.diff if prev_pay_diff else None,
        previous_month_hours_counter=prev_hours_counter,
    )


async def get_previous_month_pay(
    workers: Sequence[Worker],
    query: PayQuery,
    source: PayDataSource,
    surcharges: Sequence[SurchargeRule],
    distances: DistanceCache,
    calendar: Calendar,
    today: date,
    semaphore: asyncio.Semaphore | None = None,
) -> dict[str, PrevPayDiff]:
    """Diff of the previous month for each worker, keyed by worker id."""
    semaphore = semaphore or asyncio.Semaphore(DEFAULT_CONCURRENCY)
    prev_query = get_previous_month_query(query)
    events_by_worker = await source.get_events_to_pay(
        prev_query.start_date, prev_query.end_date, [worker.id for worker in workers]
    )

    async def compute(worker: Worker) -> PrevPayDiff:
        async with semaphore:
            return await compute_prev_pay_diff(
                worker,
                events_by_worker.get(worker.id) or WorkerEvents(),
                worker.prev_pay,
                prev_query,
                distances,
                surcharges,
                calendar,
                today,
            )

    diffs = await asyncio.gather(*(compute(worker) for worker in workers))
    return {diff.worker_id: diff for diff in diffs}


async def compute_draft_pay_by_worker(
    workers: Sequence[Worker],
    query: PayQuery,
    source: PayDataSource,
    calendar: Calendar,
    concurrency: int = DEFAULT_CONCURRENCY,
    today: date | None = None,
) -> list[PayRecord]:
    """Draft pays of the workers having an active company contract at the end of the query."""
    today = today or date.today()

    contracts: dict[str, Contract] = {}
    for worker in workers:
        contract = get_company_contract(worker.contracts, query.end_date)
        if contract is None:
            logger.debug(f"Worker {worker.id} has no company contract on {query.end_date.date()}")
            continue
        contracts[worker.id] = contract
    payable = [worker for worker in workers if worker.id in contracts]
    if not payable:
        return []

    company, surcharges, known_matrices = await asyncio.gather(
        source.get_company(),
        source.get_surcharges(),
        source.get_distance_matrices(),
    )
    distances = DistanceCache(source, known_matrices)
    semaphore = asyncio.Semaphore(concurrency)

    async def compute(worker: Worker, prev_pay_diff: PrevPayDiff | None) -> PayRecord:
        async with semaphore:
            return await compute_worker_draft_pay(
                worker,
                contracts[worker.id],
                events_by_worker.get(worker.id) or WorkerEvents(),
                prev_pay_diff,
                company,
                query,
                distances,
                surcharges,
                calendar,
            )

    try:
        events_by_worker = await source.get_events_to_pay(
            query.start_date, query.end_date, [worker.id for worker in payable]
        )
        prev_pay_diffs = await get_previous_month_pay(
            payable, query, source, surcharges, distances, calendar, today, semaphore
        )
        draft_pays = await asyncio.gather(
            *(compute(worker, prev_pay_diffs.get(worker.id)) for worker in payable)
        )
    except Exception:
        logger.exception(f"Draft pay failed for period {query.start_date.date()} - {query.end_date.date()}")
        raise

    logger.info(
        f"Computed {len(draft_pays)} draft pays out of {len(workers)} workers "
        f"({len(distances)} distance matrices)"
    )
    return list(draft_pays)


async def get_draft_pay(
    source: PayDataSource,
    start_date: date,
    end_date: date,
    calendar: Calendar,
    concurrency: int = DEFAULT_CONCURRENCY,
    today: date | None = None,
) -> list[PayRecord]:
    """Draft pays of a company for whole days from `start_date` to `end_date`."""
    query = PayQuery.for_days(start_date, end_date)

    workers = await source.get_workers_to_pay(query.end_date)
    if not workers:
        return []

    return await compute_draft_pay_by_worker(workers, query, source, calendar, concurrency, today)
