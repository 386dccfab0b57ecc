"""
Calendar Service

Public holiday and business day predicates used by the pay computation.
Calendars are always passed explicitly so tests can inject fixed ones.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol

import holidays

# Monday..Saturday are worked in home care
WORKING_WEEKDAYS = frozenset(range(6))
SUNDAY = 6


class Calendar(Protocol):
    """Holiday calendar capability."""

    def is_public_holiday(self, day: date) -> bool: ...

    def is_business_day(self, day: date) -> bool: ...


class HolidayCalendar:
    """Calendar over a fixed set of holiday dates."""

    def __init__(
        self,
        public_holidays: Iterable[date] = (),
        working_weekdays: Iterable[int] = WORKING_WEEKDAYS,
    ):
        self.public_holidays = frozenset(public_holidays)
        self.working_weekdays = frozenset(working_weekdays)

    def is_public_holiday(self, day: date) -> bool:
        return _as_date(day) in self.public_holidays

    def is_business_day(self, day: date) -> bool:
        day = _as_date(day)
        return day.weekday() in self.working_weekdays and not self.is_public_holiday(day)


class PublicHolidayCalendar(HolidayCalendar):
    """
    Calendar backed by the `holidays` package.

    Years are loaded lazily by the package, so the same instance works
    across any pay period.
    """

    def __init__(
        self,
        country: str = "FR",
        subdiv: str | None = None,
        working_weekdays: Iterable[int] = WORKING_WEEKDAYS,
    ):
        super().__init__(working_weekdays=working_weekdays)
        self.country = country
        self._holidays = holidays.country_holidays(country, subdiv=subdiv)

    def is_public_holiday(self, day: date) -> bool:
        return _as_date(day) in self._holidays


@dataclass(frozen=True)
class DaysRatio:
    """Day counts of an inclusive date range."""

    business_days: int = 0
    holidays: int = 0
    sundays: int = 0


def get_days_ratio(start: date, end: date, calendar: Calendar) -> DaysRatio:
    """
    Count business days, holidays (not on a Sunday) and Sundays between two dates.

    Both bounds are included. Every day falls in exactly one bucket.
    """
    business_days = holidays_count = sundays = 0
    day = _as_date(start)
    last = _as_date(end)
    while day <= last:
        if day.weekday() == SUNDAY:
            sundays += 1
        elif calendar.is_public_holiday(day):
            holidays_count += 1
        else:
            business_days += 1
        day += timedelta(days=1)

    return DaysRatio(business_days=business_days, holidays=holidays_count, sundays=sundays)


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from `start` to `end`, truncated toward zero."""
    return int((end - start) / timedelta(minutes=1))
