"""
Integration Tests for Pay API Endpoints

Tests cover the draft pay, working stats and hours balance endpoints using the async test
client with an in-memory data source.
"""

from datetime import datetime
from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.fakes import FakePayDataSource
from tests.factories import make_company, make_contract, make_intervention, make_worker

COMPANY_ID = uuid4()
PAY_URL = f"/api/v1/companies/{COMPANY_ID}/pay"


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "carepay-api"}


# ---------------------------------------------------------------------------
# Draft Pay Tests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_draft_pay(client: AsyncClient, pay_data_source: FakePayDataSource) -> None:
    """GET /pay/draft returns one draft pay per worker to pay."""
    pay_data_source.workers = [make_worker()]
    pay_data_source.company = make_company(fee_amount=30)
    pay_data_source.events = [make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 10))]

    response = await client.get(f"{PAY_URL}/draft", params={"start_date": "2025-01-01", "end_date": "2025-01-31"})

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["worker_id"] == "worker-1"
    assert data[0]["worker"] == {"firstname": "Camille", "lastname": "Martin"}
    assert data[0]["month"] == "01-2025"
    assert data[0]["worked_hours"] == pytest.approx(2)
    assert data[0]["other_fees"] == pytest.approx(30)


@pytest.mark.asyncio
async def test_get_draft_pay_no_workers(client: AsyncClient) -> None:
    response = await client.get(f"{PAY_URL}/draft", params={"start_date": "2025-01-01", "end_date": "2025-01-31"})

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_get_draft_pay_inverted_period(client: AsyncClient) -> None:
    """GET /pay/draft with end before start returns 400."""
    response = await client.get(f"{PAY_URL}/draft", params={"start_date": "2025-01-31", "end_date": "2025-01-01"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Period end must be after period start"


@pytest.mark.asyncio
async def test_get_draft_pay_missing_period(client: AsyncClient) -> None:
    response = await client.get(f"{PAY_URL}/draft", params={"start_date": "2025-01-01"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_draft_pay_invalid_company(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/companies/not-a-uuid/pay/draft", params={"start_date": "2025-01-01", "end_date": "2025-01-31"}
    )

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Working Stats Tests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_working_stats(client: AsyncClient, pay_data_source: FakePayDataSource) -> None:
    """GET /pay/working-stats returns stats keyed by worker id."""
    pay_data_source.workers = [make_worker()]
    pay_data_source.events = [make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 11))]

    response = await client.get(
        f"{PAY_URL}/working-stats",
        params={"worker_id": ["worker-1", "worker-2"], "start_date": "2025-01-06", "end_date": "2025-01-12"},
    )

    assert response.status_code == 200
    data = response.json()
    assert list(data) == ["worker-1"]
    assert data["worker-1"]["worked_hours"] == pytest.approx(3)
    assert data["worker-1"]["hours_to_work"] == pytest.approx(24)


@pytest.mark.asyncio
async def test_get_working_stats_requires_workers(client: AsyncClient) -> None:
    response = await client.get(
        f"{PAY_URL}/working-stats", params={"start_date": "2025-01-06", "end_date": "2025-01-12"}
    )

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Hours Balance Tests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_hours_balance_detail(client: AsyncClient, pay_data_source: FakePayDataSource) -> None:
    """GET /pay/hours-balance-detail drafts an open month."""
    pay_data_source.workers = [make_worker()]
    pay_data_source.events = [make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 10))]

    response = await client.get(f"{PAY_URL}/hours-balance-detail", params={"worker_id": "worker-1", "month": "01-2025"})

    assert response.status_code == 200
    data = response.json()
    assert data["worker_id"] == "worker-1"
    assert data["month"] == "01-2025"
    assert data["worked_hours"] == pytest.approx(2)
    assert data["sectors"] == ["sector-1"]
    assert data["counter_and_diff_relevant"] is False


@pytest.mark.asyncio
async def test_get_hours_balance_detail_invalid_month(client: AsyncClient) -> None:
    response = await client.get(f"{PAY_URL}/hours-balance-detail", params={"worker_id": "worker-1", "month": "2025-01"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_hours_balance_detail_unknown_worker(client: AsyncClient) -> None:
    response = await client.get(f"{PAY_URL}/hours-balance-detail", params={"worker_id": "worker-9", "month": "01-2025"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_hours_balance_detail_no_contract(client: AsyncClient, pay_data_source: FakePayDataSource) -> None:
    """GET /pay/hours-balance-detail for a month without contract returns 400."""
    pay_data_source.workers = [make_worker(contracts=[make_contract(end_date=datetime(2024, 11, 30))])]

    response = await client.get(f"{PAY_URL}/hours-balance-detail", params={"worker_id": "worker-1", "month": "01-2025"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Worker worker-1 has no contract in 01-2025"


@pytest.mark.asyncio
async def test_get_hours_balance_detail_by_sector(client: AsyncClient, pay_data_source: FakePayDataSource) -> None:
    pay_data_source.workers = [make_worker(), make_worker(id="worker-2", sector="sector-2")]

    response = await client.get(
        f"{PAY_URL}/hours-balance-detail/by-sector", params={"sector": ["sector-1"], "month": "01-2025"}
    )

    assert response.status_code == 200
    assert [detail["worker_id"] for detail in response.json()] == ["worker-1"]


@pytest.mark.asyncio
async def test_get_hours_to_work(client: AsyncClient, pay_data_source: FakePayDataSource) -> None:
    """GET /pay/hours-to-work returns the hours to work of each sector."""
    pay_data_source.workers = [make_worker(), make_worker(id="worker-2", sector="sector-2")]

    response = await client.get(
        f"{PAY_URL}/hours-to-work", params={"sector": ["sector-1", "sector-2"], "month": "01-2025"}
    )

    assert response.status_code == 200
    data = response.json()
    assert [item["sector"] for item in data] == ["sector-1", "sector-2"]
    assert data[0]["hours_to_work"] == pytest.approx(24 * 52 / 12 - 4)


@pytest.mark.asyncio
async def test_get_hours_to_work_requires_sector(client: AsyncClient) -> None:
    response = await client.get(f"{PAY_URL}/hours-to-work", params={"month": "01-2025"})

    assert response.status_code == 422
