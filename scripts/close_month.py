"""
Close Month Script

Computes the draft pays of a closed month and stores them as the pays
the next month diffs against.

Usage:
    python -m scripts.close_month <company_id> <MM-YYYY>
"""

import asyncio
import logging
import sys
from datetime import date
from uuid import UUID

from backend.config import get_settings
from backend.db.session import get_async_session
from backend.services.pay import create_pay_list
from backend.services.pay_data_source import SQLPayDataSource
from engines.schemas.draft_pay import PayQuery
from engines.services.calendar import PublicHolidayCalendar
from engines.services.draft_pay import get_draft_pay
from integrations.maps.google import GoogleDistanceMatrixClient

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


async def close_month(company_id: UUID, month: str):
    """Compute and store the pays of a month (MM-YYYY)."""
    query = PayQuery.for_month(month)
    start, end = query.start_date.date(), query.end_date.date()
    if end >= date.today().replace(day=1):
        raise ValueError(f"Month {month} is not closed yet")

    provider = (
        GoogleDistanceMatrixClient(settings.google_maps_api_key, config={"base_url": settings.google_maps_base_url})
        if settings.google_maps_api_key
        else None
    )
    try:
        async with get_async_session() as db:
            source = SQLPayDataSource(db, company_id, provider)
            pays = await get_draft_pay(
                source,
                start,
                end,
                PublicHolidayCalendar(settings.holidays_country, settings.holidays_subdiv),
                concurrency=settings.draft_pay_concurrency,
            )
            await create_pay_list(db, company_id, pays)
    finally:
        if provider:
            await provider.close()

    print(f"Closed {month} for company {company_id}: {len(pays)} pays stored")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    asyncio.run(close_month(UUID(sys.argv[1]), sys.argv[2]))
