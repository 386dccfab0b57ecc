"""
Pay Diff Engine

Events of a month can still change after its pay was made. Once the month
is closed, its paid hours are computed again and compared with the stored
pay; the signed differences are paid with the next month.
"""

from collections.abc import Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from engines.schemas.draft_pay import (
    ContractStatus,
    PaidHoursTotals,
    PayDiff,
    PayQuery,
    PlanSurchargeDetail,
    PreviousPay,
    PrevPayDiff,
    SurchargeDetails,
    SurchargeHours,
    SurchargeRule,
    Worker,
    WorkerEvents,
)
from engines.services.calendar import Calendar
from engines.services.period import get_pay_from_absences, get_pay_from_events
from engines.services.transport import DistanceCache

DIFF_FIELDS = (
    "worked_hours",
    "internal_hours",
    "paid_transport_hours",
    "not_surcharged_and_not_exempt",
    "surcharged_and_not_exempt",
    "not_surcharged_and_exempt",
    "surcharged_and_exempt",
)
DETAIL_FIELDS = ("surcharged_and_not_exempt_details", "surcharged_and_exempt_details")


def should_compute_diff(query: PayQuery, today: date) -> bool:
    """Diffs are only computed for months closed before the current one."""
    return query.end_date.date() < today.replace(day=1)


def round_hours(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def get_diff(current: float | None, previous: float | None) -> float:
    """Signed difference rounded to 2 decimals; a missing current value means no diff."""
    if previous and current:
        diff = current - previous
    elif current:
        diff = current
    else:
        diff = 0
    return round_hours(diff)


def compute_prev_pay_detail_diff(
    details: SurchargeDetails, prev_details: SurchargeDetails | None
) -> SurchargeDetails:
    """Surcharge details minus the ones stored in the previous pay."""
    diff = {
        plan_id: detail.model_copy(update={"surcharges": dict(detail.surcharges)})
        for plan_id, detail in details.items()
    }
    if not prev_details:
        return diff

    for plan_id, prev_detail in prev_details.items():
        plan = diff.setdefault(plan_id, PlanSurchargeDetail(plan_name=prev_detail.plan_name))
        for key, prev_hours in prev_detail.surcharges.items():
            current = plan.surcharges.get(key)
            if current is not None:
                plan.surcharges[key] = current.model_copy(update={"hours": current.hours - prev_hours.hours})
            else:
                plan.surcharges[key] = SurchargeHours(hours=-prev_hours.hours, percentage=prev_hours.percentage)

    return diff


def build_pay_diff(hours: PaidHoursTotals, absences_hours: float, prev_pay: PreviousPay | None) -> PayDiff:
    """Field by field difference between recomputed hours and the stored pay."""
    if prev_pay and prev_pay.absences_hours:
        absences_diff = round_hours(absences_hours - prev_pay.absences_hours)
    else:
        absences_diff = round_hours(absences_hours)

    values = {
        field: get_diff(getattr(hours, field), getattr(prev_pay, field) if prev_pay else None)
        for field in DIFF_FIELDS
    }
    for field in DETAIL_FIELDS:
        values[field] = compute_prev_pay_detail_diff(
            getattr(hours, field), getattr(prev_pay, field) if prev_pay else None
        )

    return PayDiff(
        **values,
        absences_hours=absences_diff,
        hours_balance=absences_diff + values["worked_hours"],
    )


async def compute_prev_pay_diff(
    worker: Worker,
    events_to_pay: WorkerEvents,
    prev_pay: PreviousPay | None,
    query: PayQuery,
    distances: DistanceCache,
    surcharges: Sequence[SurchargeRule],
    calendar: Calendar,
    today: date,
) -> PrevPayDiff:
    """Recompute a closed month and diff it against its stored pay."""
    if not should_compute_diff(query, today):
        return PrevPayDiff(worker_id=worker.id)

    contract = next(
        (
            contract
            for contract in worker.contracts
            if contract.status == ContractStatus.COMPANY_CONTRACT
            and (contract.end_date is None or contract.end_date > query.end_date)
        ),
        None,
    )
    hours = await get_pay_from_events(events_to_pay.events, worker, distances, surcharges, query, calendar)
    absences_hours = (
        get_pay_from_absences(events_to_pay.absences, contract, query, calendar) if contract else 0.0
    )

    return PrevPayDiff(
        worker_id=worker.id,
        diff=build_pay_diff(hours, absences_hours, prev_pay),
        hours_counter=prev_pay.hours_counter if prev_pay and prev_pay.hours_counter else 0,
    )
