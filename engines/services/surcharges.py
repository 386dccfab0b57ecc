"""
Surcharge Resolver

Splits the paid hours of an event between surcharged and not surcharged
hours according to the surcharge plan of its service.

Calendar surcharges are exclusive and evaluated in a fixed priority:
25 December, 1 May, public holiday, Saturday, Sunday. The first enabled
match takes the whole event. Evening and custom surcharges are only
evaluated when no calendar surcharge matched, and they add up.
"""

from datetime import datetime, timedelta

from engines.schemas.draft_pay import (
    EventHours,
    PaidTransport,
    PlanSurchargeDetail,
    ScheduledEvent,
    SurchargeDetails,
    SurchargeHours,
    SurchargeKey,
    SurchargeRule,
)
from engines.services.calendar import Calendar, minutes_between

SATURDAY = 5
SUNDAY = 6


def _window_bound(day: datetime, hour: str) -> datetime:
    return day.replace(hour=int(hour[:2]), minute=int(hour[3:5]))


def compute_custom_surcharge(
    event: ScheduledEvent,
    start_hour: str,
    end_hour: str,
    paid_transport_duration: float,
) -> float:
    """
    Surcharged hours of an event for a clock-time window.

    The window is placed on the event start day and wraps past midnight
    when it ends before it starts. Transport time is surcharged only when
    the event start is inside the window.
    """
    start = _window_bound(event.start_date, start_hour)
    end = _window_bound(event.start_date, end_hour)
    if start > end:
        end += timedelta(days=1)

    if start <= event.start_date and end >= event.end_date:
        return (event.duration_minutes + paid_transport_duration) / 60

    surcharged_minutes: float = 0
    if start <= event.start_date < end < event.end_date:
        surcharged_minutes = minutes_between(event.start_date, end) + paid_transport_duration
    elif event.start_date < start < event.end_date <= end:
        surcharged_minutes = minutes_between(start, event.end_date)
    elif start > event.start_date and end < event.end_date:
        surcharged_minutes = minutes_between(start, end)

    return surcharged_minutes / 60


def add_surcharge_details(
    details: SurchargeDetails,
    surcharged_hours: float,
    surcharge: SurchargeRule,
    surcharge_key: SurchargeKey,
) -> SurchargeDetails:
    """Return a copy of `details` with `surcharged_hours` added under the plan and key."""
    updated = dict(details)
    current = updated.get(surcharge.id)
    surcharges = dict(current.surcharges) if current else {}

    previous_hours = surcharges[surcharge_key].hours if surcharge_key in surcharges else 0
    surcharges[surcharge_key] = SurchargeHours(
        hours=previous_hours + surcharged_hours,
        percentage=surcharge.percentage(surcharge_key) or 0,
    )
    updated[surcharge.id] = PlanSurchargeDetail(plan_name=surcharge.name, surcharges=surcharges)

    return updated


def apply_surcharge(
    paid_hours: float,
    surcharge: SurchargeRule,
    surcharge_key: SurchargeKey,
    details: SurchargeDetails,
    paid_transport: PaidTransport,
) -> EventHours:
    """Surcharge all paid hours of an event under one key."""
    return EventHours(
        surcharged=paid_hours,
        not_surcharged=0,
        details=add_surcharge_details(details, paid_hours, surcharge, surcharge_key),
        paid_km=paid_transport.distance,
        paid_transport_hours=paid_transport.duration / 60,
    )


def get_calendar_surcharge_key(
    event: ScheduledEvent, surcharge: SurchargeRule, calendar: Calendar
) -> SurchargeKey | None:
    """First enabled calendar surcharge matching the event start day."""
    day = event.start_date.date()
    candidates = (
        (SurchargeKey.TWENTY_FIFTH_OF_DECEMBER, day.month == 12 and day.day == 25),
        (SurchargeKey.FIRST_OF_MAY, day.month == 5 and day.day == 1),
        (SurchargeKey.PUBLIC_HOLIDAY, calendar.is_public_holiday(day)),
        (SurchargeKey.SATURDAY, day.weekday() == SATURDAY),
        (SurchargeKey.SUNDAY, day.weekday() == SUNDAY),
    )
    for key, matches in candidates:
        percentage = surcharge.percentage(key)
        if percentage and percentage > 0 and matches:
            return key
    return None


def get_surcharge_split(
    event: ScheduledEvent,
    surcharge: SurchargeRule,
    surcharge_details: SurchargeDetails,
    paid_transport: PaidTransport,
    calendar: Calendar,
) -> EventHours:
    """Split the paid hours of an event (work plus transport) using a surcharge plan."""
    paid_hours = (event.duration_minutes + paid_transport.duration) / 60

    calendar_key = get_calendar_surcharge_key(event, surcharge, calendar)
    if calendar_key is not None:
        return apply_surcharge(paid_hours, surcharge, calendar_key, surcharge_details, paid_transport)

    total_surcharged_hours = 0.0
    details = dict(surcharge_details)
    windows = (
        (SurchargeKey.EVENING, surcharge.evening, surcharge.evening_start_time, surcharge.evening_end_time),
        (SurchargeKey.CUSTOM, surcharge.custom, surcharge.custom_start_time, surcharge.custom_end_time),
    )
    for key, percentage, start_hour, end_hour in windows:
        if not percentage:
            continue
        surcharged_hours = compute_custom_surcharge(event, start_hour, end_hour, paid_transport.duration)
        if surcharged_hours:
            details = add_surcharge_details(details, surcharged_hours, surcharge, key)
        total_surcharged_hours += surcharged_hours

    return EventHours(
        surcharged=total_surcharged_hours,
        not_surcharged=paid_hours - total_surcharged_hours,
        details=details,
        paid_km=paid_transport.distance,
        paid_transport_hours=paid_transport.duration / 60,
    )
