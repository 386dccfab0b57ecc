"""
Draft Pay MCP Tools

Surcharge split and paid transport rule exposed as MCP tools.
"""

from datetime import date, datetime

from fastmcp import FastMCP

from engines.schemas.draft_pay import (
    EventType,
    PaidTransport,
    ScheduledEvent,
    SurchargeRule,
)
from engines.services.calendar import HolidayCalendar
from engines.services.surcharges import get_surcharge_split
from engines.services.transport import TRANSPORT_TOLERANCE_MINUTES, pick_transport_duration

# Initialize MCP server (will be started from server.py)
mcp = FastMCP(
    "CarePay Draft Pay Engine",
    instructions="""
Payroll calculations of the home-care draft pay.

1. **Surcharges** (calculate_event_surcharge)
   - Calendar surcharges: 25 December, 1 May, public holidays, Saturday, Sunday
   - Evening and custom clock-time windows, wrapping past midnight

2. **Transport** (calculate_paid_transport)
   - Paid trip between two consecutive events of a worker
   - Break paid instead of the trip when within the tolerance
""",
)


async def calculate_event_surcharge(
    start_date: str,
    end_date: str,
    surcharge: dict,
    paid_transport_minutes: float = 0.0,
    paid_transport_km: float = 0.0,
    public_holidays: list[str] | None = None,
) -> dict:
    """
    Split the paid hours of an intervention using a surcharge plan.

    Calendar surcharges (25 December, 1 May, public holiday, Saturday,
    Sunday) take the whole event in that priority. Otherwise evening and
    custom windows surcharge the overlapping part of the event.

    Args:
        start_date: Event start (ISO 8601 datetime)
        end_date: Event end (ISO 8601 datetime)
        surcharge: Surcharge plan, e.g. {"id": "s1", "name": "Plan", "sunday": 25}
        paid_transport_minutes: Paid trip before the event, in minutes
        paid_transport_km: Paid trip distance, in kilometers
        public_holidays: Public holiday dates (YYYY-MM-DD) to consider

    Returns:
        Dictionary with surcharged and not surcharged hours and the details by plan

    Example:
        Sunday 10:00-12:00 with a 25% Sunday surcharge:
        - surcharged: 2.0
        - not_surcharged: 0.0
        - details: {"s1": {"plan_name": "Plan", "surcharges": {"sunday": {"hours": 2.0, "percentage": 25}}}}
    """
    rule = SurchargeRule.model_validate(surcharge)
    event = ScheduledEvent(
        id="mcp",
        type=EventType.INTERVENTION,
        start_date=datetime.fromisoformat(start_date),
        end_date=datetime.fromisoformat(end_date),
        worker_id="mcp",
    )
    calendar = HolidayCalendar(date.fromisoformat(day) for day in public_holidays or [])

    result = get_surcharge_split(
        event,
        rule,
        {},
        PaidTransport(duration=paid_transport_minutes, distance=paid_transport_km),
        calendar,
    )

    return result.model_dump(mode="json")


async def calculate_paid_transport(transport_duration: float, break_duration: float) -> dict:
    """
    Paid trip duration between two consecutive events.

    The looked-up trip duration is paid when the break is shorter than the
    trip, or longer than the trip plus the tolerance. Otherwise the break
    itself is paid.

    Args:
        transport_duration: Trip duration from the distance provider, in minutes
        break_duration: Minutes between the end of the previous event and the start of the next one

    Returns:
        Dictionary with the paid duration and which value was used
    """
    paid_duration = pick_transport_duration(transport_duration, break_duration)

    return {
        "transport_duration": transport_duration,
        "break_duration": break_duration,
        "paid_duration": paid_duration,
        "used": "transport" if paid_duration == transport_duration else "break",
        "tolerance_minutes": TRANSPORT_TOLERANCE_MINUTES,
    }


# Register the tools on the MCP server
mcp.tool()(calculate_event_surcharge)
mcp.tool()(calculate_paid_transport)
