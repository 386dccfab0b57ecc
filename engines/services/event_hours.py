"""
Event Hour Splitter

Turns one scheduled event into an hour contribution and folds it into
the period totals.
"""

from collections.abc import Sequence

from engines.schemas.draft_pay import (
    EventHours,
    EventType,
    PaidHoursTotals,
    ScheduledEvent,
    ServiceVersion,
    SurchargeDetails,
    SurchargeRule,
    Worker,
)
from engines.services.calendar import Calendar
from engines.services.surcharges import get_surcharge_split
from engines.services.transport import DistanceCache, get_paid_transport_info


def get_matching_service_version(event: ScheduledEvent) -> ServiceVersion | None:
    """Latest version of the event service started on or before the event."""
    if event.service is None:
        return None
    versions = [version for version in event.service.versions if version.start_date <= event.start_date]
    if not versions:
        return None
    return max(versions, key=lambda version: version.start_date)


def resolve_service(
    event: ScheduledEvent, surcharges: Sequence[SurchargeRule]
) -> tuple[ServiceVersion | None, SurchargeRule | None]:
    """Service version and surcharge plan applying to an intervention."""
    if event.type != EventType.INTERVENTION:
        return None, None

    version = get_matching_service_version(event)
    if version is None or version.surcharge_id is None:
        return version, None

    rule = next((surcharge for surcharge in surcharges if surcharge.id == version.surcharge_id), None)
    return version, rule


async def get_event_hours(
    event: ScheduledEvent,
    prev_event: ScheduledEvent | None,
    worker: Worker,
    surcharge: SurchargeRule | None,
    details: SurchargeDetails,
    distances: DistanceCache,
    calendar: Calendar,
) -> EventHours:
    """Hours of an event including the paid trip from the previous one."""
    paid_transport = await get_paid_transport_info(event, prev_event, worker, distances)

    if surcharge is None:
        return EventHours(
            surcharged=0,
            not_surcharged=(event.duration_minutes + paid_transport.duration) / 60,
            details=dict(details),
            paid_km=paid_transport.distance,
            paid_transport_hours=paid_transport.duration / 60,
        )

    return get_surcharge_split(event, surcharge, details, paid_transport, calendar)


def increment_hours(totals: PaidHoursTotals, hours: EventHours, exempt: bool) -> PaidHoursTotals:
    """Fold an event contribution into the totals, returning new totals."""
    if exempt:
        update = {
            "surcharged_and_exempt": totals.surcharged_and_exempt + hours.surcharged,
            "not_surcharged_and_exempt": totals.not_surcharged_and_exempt + hours.not_surcharged,
            "surcharged_and_exempt_details": hours.details,
        }
    else:
        update = {
            "surcharged_and_not_exempt": totals.surcharged_and_not_exempt + hours.surcharged,
            "not_surcharged_and_not_exempt": totals.not_surcharged_and_not_exempt + hours.not_surcharged,
            "surcharged_and_not_exempt_details": hours.details,
        }

    update["worked_hours"] = totals.worked_hours + hours.surcharged + hours.not_surcharged
    update["paid_km"] = totals.paid_km + hours.paid_km
    update["paid_transport_hours"] = totals.paid_transport_hours + hours.paid_transport_hours

    return totals.model_copy(update=update)
