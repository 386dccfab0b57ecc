"""
SQL Pay Data Source

Reads the planning, contracts and stored pays of one company for the
draft pay engine.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.models.company import Company as CompanyRow
from backend.models.contract import Contract as ContractRow
from backend.models.event import Event as EventRow
from backend.models.pay import Pay as PayRow
from backend.models.surcharge import Surcharge as SurchargeRow
from backend.models.worker import Worker as WorkerRow
from backend.services.distance_matrix import get_distance_matrices, get_or_create_distance_matrix
from backend.services.pay import to_pay_record, to_previous_pay
from engines.schemas.draft_pay import (
    Company,
    Contract,
    ContractStatus,
    ContractVersion,
    DistanceMatrix,
    EventType,
    PayRecord,
    PreviousPay,
    ScheduledEvent,
    Service,
    ServiceVersion,
    SurchargeRule,
    TransportSubsidy,
    TravelMode,
    Worker,
    WorkerEvents,
    WorkerIdentity,
)
from integrations.base import DistanceMatrixProvider

logger = logging.getLogger(__name__)

SURCHARGE_FIELDS = (
    "saturday",
    "sunday",
    "public_holiday",
    "first_of_may",
    "twenty_fifth_of_december",
    "evening",
    "evening_start_time",
    "evening_end_time",
    "custom",
    "custom_start_time",
    "custom_end_time",
)


def to_contract(row: ContractRow) -> Contract:
    return Contract(
        id=str(row.id),
        status=ContractStatus(row.status),
        start_date=row.start_date,
        end_date=row.end_date,
        versions=[ContractVersion.model_validate(version) for version in row.versions],
    )


def to_event(row: EventRow) -> ScheduledEvent:
    service = None
    if row.service is not None:
        service = Service(
            id=str(row.service.id),
            name=row.service.name,
            nature=row.service.nature,
            versions=[ServiceVersion.model_validate(version) for version in row.service.versions],
        )

    return ScheduledEvent(
        id=str(row.id),
        type=EventType(row.type),
        start_date=row.start_date,
        end_date=row.end_date,
        worker_id=str(row.worker_id),
        address=row.address,
        service=service,
        has_fixed_service=service is not None and service.nature == "fixed",
        absence_nature=row.absence_nature,
    )


def to_worker(row: WorkerRow, prev_pay: PreviousPay | None = None) -> Worker:
    return Worker(
        id=str(row.id),
        identity=WorkerIdentity(firstname=row.firstname, lastname=row.lastname),
        sector=row.sector,
        transport_type=row.transport_type,
        transport_invoice_link=row.transport_invoice_link,
        zip_code=row.zip_code,
        has_mutual_fund=row.has_mutual_fund,
        contracts=[to_contract(contract) for contract in row.contracts],
        prev_pay=prev_pay,
    )


def previous_month_label(day: datetime) -> str:
    return (day.replace(day=1) - timedelta(days=1)).strftime("%m-%Y")


class SQLPayDataSource:
    """
    Draft pay data of one company, read with an async SQLAlchemy session.

    A session does not support concurrent operations, so reads are
    serialized on a lock while workers are computed concurrently.
    """

    def __init__(
        self,
        db: AsyncSession,
        company_id: UUID,
        provider: DistanceMatrixProvider | None = None,
    ):
        self.db = db
        self.company_id = company_id
        self.provider = provider
        self._lock = asyncio.Lock()

    async def get_workers_to_pay(self, end_date: datetime) -> list[Worker]:
        async with self._lock:
            result = await self.db.execute(
                select(WorkerRow)
                .join(ContractRow, ContractRow.worker_id == WorkerRow.id)
                .where(
                    WorkerRow.company_id == self.company_id,
                    ContractRow.status == ContractStatus.COMPANY_CONTRACT.value,
                    ContractRow.start_date <= end_date,
                    or_(ContractRow.end_date.is_(None), ContractRow.end_date > end_date),
                )
                .options(selectinload(WorkerRow.contracts))
                .distinct()
            )
            rows = result.scalars().all()
            if not rows:
                return []

            pays = await self.db.execute(
                select(PayRow).where(
                    PayRow.company_id == self.company_id,
                    PayRow.month == previous_month_label(end_date),
                    PayRow.worker_id.in_([row.id for row in rows]),
                )
            )
            prev_pays = {pay.worker_id: to_previous_pay(pay) for pay in pays.scalars().all()}

        logger.debug(f"{len(rows)} workers to pay for company {self.company_id}")
        return [to_worker(row, prev_pays.get(row.id)) for row in rows]

    async def get_workers(self, worker_ids: Sequence[str]) -> list[Worker]:
        """Workers of the company with their contracts."""
        async with self._lock:
            result = await self.db.execute(
                select(WorkerRow)
                .where(
                    WorkerRow.company_id == self.company_id,
                    WorkerRow.id.in_([UUID(worker_id) for worker_id in worker_ids]),
                )
                .options(selectinload(WorkerRow.contracts))
            )
            rows = result.scalars().all()

        return [to_worker(row) for row in rows]

    async def get_worker(self, worker_id: str, end_date: datetime) -> Worker | None:
        """Worker with contracts and the stored pay of the month before `end_date`."""
        async with self._lock:
            result = await self.db.execute(
                select(WorkerRow)
                .where(WorkerRow.company_id == self.company_id, WorkerRow.id == UUID(worker_id))
                .options(selectinload(WorkerRow.contracts))
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None

            pay = await self.db.execute(
                select(PayRow).where(
                    PayRow.company_id == self.company_id,
                    PayRow.worker_id == row.id,
                    PayRow.month == previous_month_label(end_date),
                )
            )
            prev_pay = pay.scalar_one_or_none()

        return to_worker(row, to_previous_pay(prev_pay) if prev_pay is not None else None)

    async def get_sector_workers(self, sectors: Sequence[str]) -> list[Worker]:
        """Workers currently in the sectors, with their contracts."""
        async with self._lock:
            result = await self.db.execute(
                select(WorkerRow)
                .where(WorkerRow.company_id == self.company_id, WorkerRow.sector.in_(list(sectors)))
                .options(selectinload(WorkerRow.contracts))
                .order_by(WorkerRow.lastname, WorkerRow.firstname)
            )
            rows = result.scalars().all()

        return [to_worker(row) for row in rows]

    async def get_pay(self, worker_id: str, month: str) -> PayRecord | None:
        """Stored pay of a worker for a month (MM-YYYY)."""
        async with self._lock:
            result = await self.db.execute(
                select(PayRow, WorkerRow)
                .join(WorkerRow, WorkerRow.id == PayRow.worker_id)
                .where(
                    PayRow.company_id == self.company_id,
                    PayRow.worker_id == UUID(worker_id),
                    PayRow.month == month,
                )
            )
            row = result.first()

        if row is None:
            return None
        pay, worker = row
        return to_pay_record(pay, worker)

    async def get_events_to_pay(
        self, start_date: datetime, end_date: datetime, worker_ids: Sequence[str]
    ) -> dict[str, WorkerEvents]:
        """Paid events grouped by worker and day, and absences by worker."""
        ids = [UUID(worker_id) for worker_id in worker_ids]
        async with self._lock:
            result = await self.db.execute(
                select(EventRow)
                .where(
                    EventRow.company_id == self.company_id,
                    EventRow.worker_id.in_(ids),
                    EventRow.start_date <= end_date,
                    EventRow.end_date >= start_date,
                    or_(
                        EventRow.type == EventType.ABSENCE.value,
                        EventRow.is_cancelled.is_(False),
                        EventRow.cancel_paid.is_(True),
                    ),
                )
                .order_by(EventRow.start_date)
            )
            rows = result.scalars().all()

        days: dict[str, dict] = defaultdict(lambda: defaultdict(list))
        absences: dict[str, list[ScheduledEvent]] = defaultdict(list)
        for row in rows:
            event = to_event(row)
            if event.type == EventType.ABSENCE:
                absences[event.worker_id].append(event)
            elif row.start_date < end_date and row.end_date > start_date:
                days[event.worker_id][event.start_date.date()].append(event)

        return {
            worker_id: WorkerEvents(
                events=[days[worker_id][day] for day in sorted(days[worker_id])],
                absences=absences[worker_id],
            )
            for worker_id in set(days) | set(absences)
        }

    async def get_company(self) -> Company | None:
        async with self._lock:
            row = await self.db.get(CompanyRow, self.company_id)
        if row is None:
            return None

        return Company(
            id=str(row.id),
            name=row.name,
            transport_subs=(
                [TransportSubsidy.model_validate(sub) for sub in row.transport_subs]
                if row.transport_subs is not None
                else None
            ),
            amount_per_km=row.amount_per_km,
            fee_amount=row.fee_amount,
        )

    async def get_surcharges(self) -> list[SurchargeRule]:
        async with self._lock:
            result = await self.db.execute(select(SurchargeRow).where(SurchargeRow.company_id == self.company_id))
            rows = result.scalars().all()

        return [
            SurchargeRule(
                id=str(row.id),
                name=row.name,
                **{field: getattr(row, field) for field in SURCHARGE_FIELDS},
            )
            for row in rows
        ]

    async def get_distance_matrices(self) -> list[DistanceMatrix]:
        async with self._lock:
            return await get_distance_matrices(self.db, self.company_id)

    async def get_or_create_distance_matrix(
        self, origins: str, destinations: str, mode: TravelMode
    ) -> DistanceMatrix | None:
        async with self._lock:
            return await get_or_create_distance_matrix(
                self.db, self.company_id, origins, destinations, mode, self.provider
            )
