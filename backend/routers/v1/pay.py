"""
Pay API Routes

Endpoints computing draft pays, working stats and hours balance of a
company. Nothing is stored by these endpoints.
"""

import logging
from collections.abc import AsyncGenerator
from datetime import date
from functools import lru_cache
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import get_settings
from backend.db.session import get_db
from backend.schemas.pay import (
    MONTH_PATTERN,
    DraftPayResponse,
    HoursBalanceDetailListResponse,
    HoursToWorkResponse,
    PayPeriod,
    WorkingStatsResponse,
)
from backend.services.pay_data_source import SQLPayDataSource
from engines.schemas.draft_pay import HoursBalanceDetail
from engines.services.calendar import Calendar, PublicHolidayCalendar
from engines.services.draft_pay import get_draft_pay
from engines.services.hours_balance import (
    WorkerNotFoundError,
    get_hours_balance_detail,
    get_hours_balance_detail_by_sector,
    get_hours_to_work_by_sector,
)
from engines.services.working_stats import get_working_stats
from integrations.base import DistanceMatrixProvider
from integrations.maps.google import GoogleDistanceMatrixClient

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def get_calendar() -> Calendar:
    """Public holiday calendar of the configured country."""
    settings = get_settings()
    return PublicHolidayCalendar(settings.holidays_country, settings.holidays_subdiv)


async def get_distance_provider() -> AsyncGenerator[DistanceMatrixProvider | None, None]:
    """Google distance matrix client, None when no API key is configured."""
    settings = get_settings()
    if not settings.google_maps_api_key:
        yield None
        return

    provider = GoogleDistanceMatrixClient(
        settings.google_maps_api_key,
        config={"base_url": settings.google_maps_base_url},
    )
    try:
        yield provider
    finally:
        await provider.close()


def get_pay_data_source(
    company_id: UUID,
    db: AsyncSession = Depends(get_db),
    provider: DistanceMatrixProvider | None = Depends(get_distance_provider),
) -> SQLPayDataSource:
    return SQLPayDataSource(db, company_id, provider)


def get_pay_period(
    start_date: date = Query(..., description="First day of the period"),
    end_date: date = Query(..., description="Last day of the period"),
) -> PayPeriod:
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Period end must be after period start",
        )
    return PayPeriod(start_date=start_date, end_date=end_date)


@router.get(
    "/draft",
    response_model=DraftPayResponse,
    summary="Draft pay",
    description="Compute the draft pay of every worker with a company contract at the end of the period.",
)
async def get_draft_pay_list(
    company_id: UUID,
    period: PayPeriod = Depends(get_pay_period),
    source: SQLPayDataSource = Depends(get_pay_data_source),
    calendar: Calendar = Depends(get_calendar),
) -> DraftPayResponse:
    """Compute draft pays for a period."""
    settings = get_settings()
    try:
        pays = await get_draft_pay(
            source,
            period.start_date,
            period.end_date,
            calendar,
            concurrency=settings.draft_pay_concurrency,
        )
    except ValueError as e:
        logger.warning(f"Invalid draft pay data for company {company_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return pays


@router.get(
    "/working-stats",
    response_model=WorkingStatsResponse,
    summary="Working stats",
    description="Worked hours and hours to work of the selected workers over a week.",
)
async def get_working_stats_list(
    company_id: UUID,
    worker_id: list[str] = Query(..., description="Workers to report on"),
    period: PayPeriod = Depends(get_pay_period),
    source: SQLPayDataSource = Depends(get_pay_data_source),
    calendar: Calendar = Depends(get_calendar),
) -> WorkingStatsResponse:
    """Compute working stats of workers."""
    try:
        return await get_working_stats(source, worker_id, period.start_date, period.end_date, calendar)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get(
    "/hours-balance-detail",
    response_model=HoursBalanceDetail,
    summary="Hours balance detail",
    description="Stored pay of a worker for a closed month, or its draft pay for an open one.",
)
async def get_worker_hours_balance_detail(
    company_id: UUID,
    worker_id: str = Query(..., description="Worker to report on"),
    month: str = Query(..., pattern=MONTH_PATTERN, description="Month (MM-YYYY)"),
    source: SQLPayDataSource = Depends(get_pay_data_source),
    calendar: Calendar = Depends(get_calendar),
) -> HoursBalanceDetail:
    """Get the hours balance of a worker."""
    try:
        return await get_hours_balance_detail(source, worker_id, month, calendar)
    except WorkerNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get(
    "/hours-balance-detail/by-sector",
    response_model=HoursBalanceDetailListResponse,
    summary="Hours balance detail by sector",
    description="Hours balance of every worker of the sectors having a contract in the month.",
)
async def get_sector_hours_balance_detail(
    company_id: UUID,
    month: str = Query(..., pattern=MONTH_PATTERN, description="Month (MM-YYYY)"),
    sector: list[str] = Query(..., description="Sectors to report on"),
    source: SQLPayDataSource = Depends(get_pay_data_source),
    calendar: Calendar = Depends(get_calendar),
) -> HoursBalanceDetailListResponse:
    """Get the hours balance of the workers of sectors."""
    try:
        return await get_hours_balance_detail_by_sector(source, sector, month, calendar)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get(
    "/hours-to-work",
    response_model=HoursToWorkResponse,
    summary="Hours to work by sector",
    description="Contract hours of the month less holidays and absences, summed by sector.",
)
async def get_sector_hours_to_work(
    company_id: UUID,
    month: str = Query(..., pattern=MONTH_PATTERN, description="Month (MM-YYYY)"),
    sector: list[str] = Query(..., description="Sectors to report on"),
    source: SQLPayDataSource = Depends(get_pay_data_source),
    calendar: Calendar = Depends(get_calendar),
) -> HoursToWorkResponse:
    """Get the hours to work of sectors."""
    try:
        return await get_hours_to_work_by_sector(source, sector, month, calendar)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
