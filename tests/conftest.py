"""
Test Configuration and Fixtures

Provides a fixed holiday calendar, fake data fixtures, and an async test
client with dependency overrides.
"""

from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from backend.main import app
from backend.routers.v1.pay import get_calendar, get_pay_data_source
from engines.services.calendar import HolidayCalendar
from engines.services.transport import DistanceCache
from tests.fakes import FakeDistanceLookup, FakePayDataSource

PUBLIC_HOLIDAYS = [
    date(2025, 1, 1),
    date(2025, 4, 21),
    date(2025, 5, 1),
    date(2025, 5, 8),
    date(2025, 5, 29),
    date(2025, 6, 9),
    date(2025, 7, 14),
    date(2025, 8, 15),
    date(2025, 11, 1),
    date(2025, 11, 11),
    date(2025, 12, 25),
    date(2022, 12, 25),
]


@pytest.fixture
def calendar() -> HolidayCalendar:
    """French public holidays of 2025 (and Christmas 2022)."""
    return HolidayCalendar(PUBLIC_HOLIDAYS)


@pytest.fixture
def distance_lookup() -> FakeDistanceLookup:
    return FakeDistanceLookup()


@pytest.fixture
def distances(distance_lookup: FakeDistanceLookup) -> DistanceCache:
    """Empty per-run distance cache over the fake lookup."""
    return DistanceCache(distance_lookup)


@pytest.fixture
def pay_data_source() -> FakePayDataSource:
    return FakePayDataSource()


@pytest_asyncio.fixture(scope="function")
async def client(
    pay_data_source: FakePayDataSource, calendar: HolidayCalendar
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async test client with the data source and calendar overridden."""
    app.dependency_overrides[get_pay_data_source] = lambda: pay_data_source
    app.dependency_overrides[get_calendar] = lambda: calendar

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
