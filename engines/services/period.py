"""
Period Aggregator

Accumulates the event contributions of one worker over a pay period and
computes the balance against contractual hours.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, time, timedelta

from engines.schemas.draft_pay import (
    AbsenceNature,
    Company,
    Contract,
    EventType,
    MonthBalance,
    PaidHoursTotals,
    PayQuery,
    ScheduledEvent,
    SurchargeRule,
    TransportType,
    Worker,
    WorkerEvents,
)
from engines.services.calendar import Calendar, minutes_between
from engines.services.contracts import get_contract_month_info, get_matching_version
from engines.services.event_hours import get_event_hours, increment_hours, resolve_service
from engines.services.transport import DistanceCache

logger = logging.getLogger(__name__)

PUBLIC_TRANSPORT_REFUND_RATE = 0.5


def clamp_event(event: ScheduledEvent, query: PayQuery) -> ScheduledEvent:
    """Copy of the event restricted to the query range."""
    return event.model_copy(
        update={
            "start_date": max(event.start_date, query.start_date),
            "end_date": min(event.end_date, query.end_date),
        }
    )


async def get_pay_from_events(
    events: Sequence[Sequence[ScheduledEvent]],
    worker: Worker,
    distances: DistanceCache,
    surcharges: Sequence[SurchargeRule],
    query: PayQuery,
    calendar: Calendar,
) -> PaidHoursTotals:
    """
    Paid hours of a worker from events grouped by day.

    Events of a day are processed by start date since the paid trip of an
    event depends on the event before it.
    """
    totals = PaidHoursTotals()
    for events_per_day in events:
        sorted_events = sorted(events_per_day, key=lambda event: event.start_date)
        for index, event in enumerate(sorted_events):
            paid_event = clamp_event(event, query)
            if paid_event.type == EventType.INTERVENTION and paid_event.has_fixed_service:
                # Fixed services are paid manually as a bonus
                continue

            service_version, surcharge = resolve_service(paid_event, surcharges)
            prev_event = sorted_events[index - 1] if index > 0 else None
            exempt = bool(service_version and service_version.exempt_from_charges)
            details = (
                totals.surcharged_and_exempt_details if exempt else totals.surcharged_and_not_exempt_details
            )

            hours = await get_event_hours(
                paid_event, prev_event, worker, surcharge, details, distances, calendar
            )
            totals = increment_hours(totals, hours, exempt)
            if paid_event.type == EventType.INTERNAL_HOUR:
                totals = totals.model_copy(
                    update={"internal_hours": totals.internal_hours + hours.surcharged + hours.not_surcharged}
                )

    return totals


def get_pay_from_absences(
    absences: Sequence[ScheduledEvent],
    contract: Contract,
    query: PayQuery,
    calendar: Calendar,
) -> float:
    """
    Hours of absence to deduct from the hours to work.

    Hourly absences count their duration. Daily absences count a sixth of
    the weekly contract hours per business day within the absence, the
    query and the contract.
    """
    hours = 0.0
    for absence in absences:
        if absence.absence_nature != AbsenceNature.DAILY:
            hours += minutes_between(absence.start_date, absence.end_date) / 60
            continue

        start = max(datetime.combine(absence.start_date.date(), time.min), query.start_date, contract.start_date)
        end = min(absence.end_date, query.end_date)
        if contract.end_date is not None:
            end = min(end, contract.end_date)

        day = start
        while day <= end:
            if calendar.is_business_day(day.date()):
                version = (
                    contract.versions[0]
                    if len(contract.versions) == 1
                    else get_matching_version(day, contract.versions)
                )
                if version is not None:
                    hours += version.weekly_hours / 6
            day += timedelta(days=1)

    return hours


def get_transport_refund(
    worker: Worker, company: Company | None, worked_days_ratio: float, paid_km: float
) -> float:
    """Refund of the worker's transport costs, zero when configuration is missing."""
    if worker.transport_type == TransportType.PUBLIC_TRANSPORT:
        if company is None or company.transport_subs is None:
            return 0
        if not worker.zip_code or not worker.transport_invoice_link:
            return 0

        department = worker.zip_code[:2]
        subsidy = next((sub for sub in company.transport_subs if sub.department == department), None)
        if subsidy is None:
            logger.debug(f"No transport subsidy for department {department} (worker {worker.id})")
            return 0

        return subsidy.price * PUBLIC_TRANSPORT_REFUND_RATE * worked_days_ratio

    if worker.transport_type == TransportType.PRIVATE_TRANSPORT:
        if company is None or company.amount_per_km is None:
            return 0
        return paid_km * company.amount_per_km

    return 0


def get_other_fees(company: Company | None, worked_days_ratio: float) -> float:
    """Flat monthly fees prorated on worked days."""
    fee_amount = company.fee_amount if company is not None else None
    return (fee_amount or 0) * worked_days_ratio


def filter_events_for_contract(
    events: Sequence[Sequence[ScheduledEvent]], contract: Contract
) -> list[Sequence[ScheduledEvent]]:
    """Day groups starting during the contract."""
    kept = []
    for events_per_day in events:
        if not events_per_day:
            continue
        first_start = events_per_day[0].start_date
        if contract.end_date is not None:
            in_contract = contract.start_date.date() <= first_start.date() <= contract.end_date.date()
        else:
            in_contract = first_start >= contract.start_date
        if in_contract:
            kept.append(events_per_day)
    return kept


def filter_absences_for_contract(
    absences: Sequence[ScheduledEvent], contract: Contract
) -> list[ScheduledEvent]:
    """Absences overlapping the contract."""
    kept = []
    for absence in absences:
        if contract.end_date is None:
            ends_in_contract = absence.end_date > contract.start_date
        else:
            ends_in_contract = contract.start_date.date() <= absence.end_date.date() <= contract.end_date.date()
        contract_starts_in_absence = (
            absence.start_date.date() <= contract.start_date.date() <= absence.end_date.date()
        )
        if ends_in_contract or contract_starts_in_absence:
            kept.append(absence)
    return kept


async def compute_balance(
    worker: Worker,
    contract: Contract,
    events_to_pay: WorkerEvents,
    company: Company | None,
    query: PayQuery,
    distances: DistanceCache,
    surcharges: Sequence[SurchargeRule],
    calendar: Calendar,
) -> MonthBalance:
    """Paid hours and hours balance of a worker over the query."""
    contract_info = get_contract_month_info(contract, query, calendar)

    contract_events = filter_events_for_contract(events_to_pay.events, contract)
    hours = await get_pay_from_events(contract_events, worker, distances, surcharges, query, calendar)

    contract_absences = filter_absences_for_contract(events_to_pay.absences, contract)
    absences_hours = get_pay_from_absences(contract_absences, contract, query, calendar)

    hours_to_work = max(contract_info.contract_hours - contract_info.holidays_hours - absences_hours, 0)

    return MonthBalance(
        **hours.model_dump(),
        contract_hours=contract_info.contract_hours,
        holidays_hours=contract_info.holidays_hours,
        absences_hours=absences_hours,
        hours_to_work=hours_to_work,
        hours_balance=hours.worked_hours - hours_to_work,
        transport=get_transport_refund(worker, company, contract_info.worked_days_ratio, hours.paid_km),
        other_fees=get_other_fees(company, contract_info.worked_days_ratio),
    )
