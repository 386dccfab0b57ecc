"""
Contract Info Service

Contract lookups and contractual hours over a pay period.
"""

import calendar as month_calendar
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from engines.schemas.draft_pay import Contract, ContractStatus, ContractVersion, PayQuery
from engines.services.calendar import Calendar, DaysRatio, get_days_ratio

WEEKS_PER_MONTH = 52 / 12


@dataclass(frozen=True)
class ContractInfo:
    contract_hours: float
    holidays_hours: float
    worked_days_ratio: float


def get_company_contract(contracts: Sequence[Contract], end_date: datetime) -> Contract | None:
    """Company contract active on `end_date`."""
    for contract in contracts:
        if contract.status != ContractStatus.COMPANY_CONTRACT:
            continue
        if contract.start_date > end_date:
            continue
        if contract.end_date is None or contract.end_date > end_date:
            return contract
    return None


def get_contract_for_range(
    contracts: Sequence[Contract], start_date: datetime, end_date: datetime
) -> Contract | None:
    """First contract overlapping [start_date, end_date]."""
    for contract in contracts:
        if contract.start_date > end_date:
            continue
        if contract.end_date is None or contract.end_date >= start_date:
            return contract
    return None


def get_matching_versions_list(
    versions: Sequence[ContractVersion], query: PayQuery
) -> list[ContractVersion]:
    """Versions in force at some point of the query."""
    return [
        version
        for version in versions
        if version.start_date <= query.end_date
        and not (version.end_date is not None and version.end_date <= query.start_date)
    ]


def get_matching_version(day: datetime, versions: Sequence[ContractVersion]) -> ContractVersion | None:
    """Latest version started on or before `day`."""
    candidates = [version for version in versions if version.start_date <= day]
    if not candidates:
        return None
    return max(candidates, key=lambda version: version.start_date)


def get_contract_info(
    versions: Sequence[ContractVersion],
    query: PayQuery,
    period_ratio: DaysRatio,
    calendar: Calendar,
) -> ContractInfo:
    """
    Prorate weekly hours of each version over the reference period.

    `period_ratio` describes the whole reference period (month or week);
    each version only counts the days of the query it covers.
    """
    contract_hours = 0.0
    holidays_hours = 0.0
    worked_days = 0
    period_days = period_ratio.business_days + period_ratio.holidays

    for version in versions:
        start = (
            query.start_date
            if version.start_date < query.start_date
            else datetime.combine(version.start_date.date(), time.min)
        )
        end = (
            datetime.combine(version.end_date.date(), time.max)
            if version.end_date is not None and version.end_date < query.end_date
            else query.end_date
        )
        ratio = get_days_ratio(start, end, calendar)

        version_days = ratio.business_days + ratio.holidays
        worked_days += version_days
        if period_days:
            contract_hours += version.weekly_hours * (version_days / period_days)
        holidays_hours += (version.weekly_hours / 6) * ratio.holidays

    return ContractInfo(
        contract_hours=contract_hours,
        holidays_hours=holidays_hours,
        worked_days_ratio=worked_days / period_days if period_days else 0.0,
    )


def get_contract_month_info(contract: Contract, query: PayQuery, calendar: Calendar) -> ContractInfo:
    """Contract hours of the month containing the query start."""
    month_start = query.start_date.date().replace(day=1)
    last_day = month_calendar.monthrange(month_start.year, month_start.month)[1]
    month_end = month_start.replace(day=last_day)

    month_ratio = get_days_ratio(month_start, month_end, calendar)
    versions = get_matching_versions_list(contract.versions, query)
    info = get_contract_info(versions, query, month_ratio, calendar)

    return ContractInfo(
        contract_hours=info.contract_hours * WEEKS_PER_MONTH,
        holidays_hours=info.holidays_hours,
        worked_days_ratio=info.worked_days_ratio,
    )


def get_contract_week_info(contract: Contract, query: PayQuery, calendar: Calendar) -> ContractInfo:
    """Contract hours of the week (Monday to Sunday) containing the query start."""
    week_start: date = query.start_date.date() - timedelta(days=query.start_date.weekday())
    week_end = week_start + timedelta(days=6)

    week_ratio = get_days_ratio(week_start, week_end, calendar)
    versions = get_matching_versions_list(contract.versions, query)

    return get_contract_info(versions, query, week_ratio, calendar)
