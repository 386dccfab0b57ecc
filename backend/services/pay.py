"""
Pay Storage Service

Converts draft pays to stored pays and back. Surcharge details are kept
as a list of plans in storage and as a mapping by plan id in the engine.
"""

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.pay import Pay
from backend.models.worker import Worker
from engines.schemas.draft_pay import (
    PayDiff,
    PayRecord,
    PlanSurchargeDetail,
    PreviousPay,
    SurchargeDetails,
    SurchargeHours,
    SurchargeKey,
    WorkerIdentity,
)

logger = logging.getLogger(__name__)

DETAIL_FIELDS = ("surcharged_and_not_exempt_details", "surcharged_and_exempt_details")

# Columns of a stored pay mapped one to one on the draft pay
PAY_FIELDS = tuple(
    field
    for field in PayRecord.model_fields
    if field not in {"worker_id", "worker", "sector", "diff", "previous_month_hours_counter", *DETAIL_FIELDS}
)


def format_surcharge_details(details: SurchargeDetails) -> list[dict]:
    """Surcharge details as stored: one entry per plan, with its id."""
    return [
        {
            "plan_id": plan_id,
            "plan_name": detail.plan_name,
            **{key.value: hours.model_dump() for key, hours in detail.surcharges.items()},
        }
        for plan_id, detail in details.items()
    ]


def parse_surcharge_details(stored: Sequence[dict] | None) -> SurchargeDetails:
    """Stored surcharge details back to a mapping by plan id."""
    details: SurchargeDetails = {}
    for entry in stored or []:
        surcharges = {
            key: SurchargeHours.model_validate(entry[key.value]) for key in SurchargeKey if key.value in entry
        }
        details[str(entry["plan_id"])] = PlanSurchargeDetail(plan_name=entry.get("plan_name", ""), surcharges=surcharges)
    return details


def format_diff(diff: PayDiff | None) -> dict | None:
    if diff is None:
        return None
    stored = diff.model_dump(mode="json", exclude=set(DETAIL_FIELDS))
    for field in DETAIL_FIELDS:
        stored[field] = format_surcharge_details(getattr(diff, field))
    return stored


def parse_diff(stored: dict | None) -> PayDiff | None:
    if stored is None:
        return None
    values = {key: value for key, value in stored.items() if key not in DETAIL_FIELDS}
    details = {field: parse_surcharge_details(stored.get(field)) for field in DETAIL_FIELDS}
    return PayDiff(**values, **details)


def format_pay(pay: PayRecord, company_id: UUID) -> dict:
    """Column values of the stored pay of a draft pay."""
    values = pay.model_dump(exclude={"worker", "sector", "diff", "previous_month_hours_counter", *DETAIL_FIELDS})
    for field in DETAIL_FIELDS:
        values[field] = format_surcharge_details(getattr(pay, field))

    return {
        **values,
        "worker_id": UUID(pay.worker_id),
        "company_id": company_id,
        "diff": format_diff(pay.diff),
    }


def to_previous_pay(pay: Pay) -> PreviousPay:
    """Stored pay as the previous month pay of a draft pay."""
    return PreviousPay(
        month=pay.month,
        worked_hours=pay.worked_hours,
        internal_hours=pay.internal_hours,
        paid_transport_hours=pay.paid_transport_hours,
        paid_km=pay.paid_km,
        not_surcharged_and_not_exempt=pay.not_surcharged_and_not_exempt,
        surcharged_and_not_exempt=pay.surcharged_and_not_exempt,
        surcharged_and_not_exempt_details=parse_surcharge_details(pay.surcharged_and_not_exempt_details),
        not_surcharged_and_exempt=pay.not_surcharged_and_exempt,
        surcharged_and_exempt=pay.surcharged_and_exempt,
        surcharged_and_exempt_details=parse_surcharge_details(pay.surcharged_and_exempt_details),
        absences_hours=pay.absences_hours,
        hours_balance=pay.hours_balance,
        hours_counter=pay.hours_counter,
    )


def to_pay_record(pay: Pay, worker: Worker) -> PayRecord:
    """Stored pay back to the pay record of its worker."""
    diff = parse_diff(pay.diff)
    diff_balance = diff.hours_balance if diff else 0

    return PayRecord(
        **{field: getattr(pay, field) for field in PAY_FIELDS},
        worker_id=str(pay.worker_id),
        worker=WorkerIdentity(firstname=worker.firstname, lastname=worker.lastname),
        sector=worker.sector,
        surcharged_and_not_exempt_details=parse_surcharge_details(pay.surcharged_and_not_exempt_details),
        surcharged_and_exempt_details=parse_surcharge_details(pay.surcharged_and_exempt_details),
        diff=diff,
        previous_month_hours_counter=pay.hours_counter - pay.hours_balance - diff_balance,
    )


async def create_pay_list(db: AsyncSession, company_id: UUID, pays: Sequence[PayRecord]) -> list[Pay]:
    """Store the pays of a closed month."""
    rows = [Pay(**format_pay(pay, company_id)) for pay in pays]
    db.add_all(rows)
    await db.flush()

    logger.info(f"Stored {len(rows)} pays for company {company_id}")
    return rows
