"""
Draft Pay Orchestrator Unit Tests

Tests for the batch draft pay of a company, including the carried hours
counter and the previous month diff.
"""

import asyncio
from datetime import date, datetime

import pytest

from engines.schemas.draft_pay import PayQuery, PreviousPay, TransportType, TravelMode
from engines.services.contracts import WEEKS_PER_MONTH
from engines.services.draft_pay import get_draft_pay, get_previous_month_query
from tests.fakes import FakePayDataSource
from tests.factories import (
    make_company,
    make_contract,
    make_distance_matrix,
    make_intervention,
    make_worker,
    with_transport,
)

TODAY = date(2025, 1, 20)
JANUARY_BALANCE = 2 - (24 * WEEKS_PER_MONTH - 4)


class FailingPayDataSource(FakePayDataSource):
    async def get_or_create_distance_matrix(self, origins, destinations, mode):
        raise RuntimeError("distance provider unavailable")


class SlowPayDataSource(FakePayDataSource):
    """Tracks how many distance lookups run at the same time."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_or_create_distance_matrix(self, origins, destinations, mode):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            return await super().get_or_create_distance_matrix(origins, destinations, mode)
        finally:
            self.in_flight -= 1


def january_events(worker_id: str = "worker-1"):
    return [make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 10), worker_id=worker_id)]


class TestPreviousMonthQuery:
    def test_january(self):
        query = get_previous_month_query(PayQuery.for_days(date(2025, 1, 1), date(2025, 1, 31)))

        assert query == PayQuery.for_days(date(2024, 12, 1), date(2024, 12, 31))

    def test_march(self):
        query = get_previous_month_query(PayQuery.for_days(date(2025, 3, 1), date(2025, 3, 31)))

        assert query == PayQuery.for_days(date(2025, 2, 1), date(2025, 2, 28))


class TestGetDraftPay:
    """Test draft pay of a company."""

    @pytest.mark.asyncio
    async def test_no_workers(self, calendar):
        result = await get_draft_pay(FakePayDataSource(), date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert result == []

    @pytest.mark.asyncio
    async def test_pay_record(self, calendar):
        source = FakePayDataSource(workers=[make_worker()], events=january_events(), company=make_company())

        [pay] = await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert pay.worker_id == "worker-1"
        assert pay.worker.firstname == "Camille"
        assert pay.sector == "sector-1"
        assert pay.month == "01-2025"
        assert pay.start_date == datetime(2025, 1, 1)
        assert pay.worked_hours == pytest.approx(2)
        assert pay.hours_balance == pytest.approx(JANUARY_BALANCE)
        assert pay.mutual is True
        assert pay.overtime_hours == 0
        assert pay.additional_hours == 0
        assert pay.bonus == 0

    @pytest.mark.asyncio
    async def test_hours_counter_carries_previous_month(self, calendar):
        """Counter = previous counter + previous month correction + balance."""
        worker = make_worker(
            prev_pay=PreviousPay(
                month="12-2024", worked_hours=3, not_surcharged_and_not_exempt=3, hours_counter=10
            )
        )
        events = january_events() + [make_intervention(datetime(2024, 12, 9, 8), datetime(2024, 12, 9, 12))]
        source = FakePayDataSource(workers=[worker], events=events)

        [pay] = await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert pay.diff.worked_hours == 1
        assert pay.diff.hours_balance == 1
        assert pay.previous_month_hours_counter == 10
        assert pay.hours_counter == pytest.approx(10 + 1 + JANUARY_BALANCE)

    @pytest.mark.asyncio
    async def test_open_previous_month_has_no_diff(self, calendar):
        worker = make_worker(prev_pay=PreviousPay(month="12-2024", worked_hours=3, hours_counter=10))
        source = FakePayDataSource(workers=[worker], events=january_events())

        [pay] = await get_draft_pay(
            source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=date(2024, 12, 20)
        )

        assert pay.diff is None
        assert pay.previous_month_hours_counter == 0
        assert pay.hours_counter == pytest.approx(pay.hours_balance)

    @pytest.mark.asyncio
    async def test_worker_without_active_contract_is_skipped(self, calendar):
        ended = make_worker(id="worker-2", contracts=[make_contract(end_date=datetime(2025, 1, 15))])
        source = FakePayDataSource(workers=[make_worker(), ended], events=january_events())

        result = await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert [pay.worker_id for pay in result] == ["worker-1"]

    @pytest.mark.asyncio
    async def test_contract_starting_during_period(self, calendar):
        worker = make_worker(contracts=[make_contract(start_date=datetime(2025, 1, 15))])
        source = FakePayDataSource(workers=[worker])

        [pay] = await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert pay.start_date == datetime(2025, 1, 15)
        assert pay.worked_hours == 0

    @pytest.mark.asyncio
    async def test_mutual_fund_holder(self, calendar):
        source = FakePayDataSource(workers=[make_worker(has_mutual_fund=True)])

        [pay] = await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert pay.mutual is False

    @pytest.mark.asyncio
    async def test_all_workers_computed_with_limited_concurrency(self, calendar):
        workers = [make_worker(id=f"worker-{index}") for index in range(1, 4)]
        events = [event for worker in workers for event in january_events(worker.id)]
        source = FakePayDataSource(workers=workers, events=events)

        result = await get_draft_pay(
            source, date(2025, 1, 1), date(2025, 1, 31), calendar, concurrency=1, today=TODAY
        )

        assert sorted(pay.worker_id for pay in result) == ["worker-1", "worker-2", "worker-3"]
        assert all(pay.worked_hours == pytest.approx(2) for pay in result)

    @pytest.mark.asyncio
    async def test_known_distances_are_reused(self, calendar):
        worker = with_transport(make_worker(), TransportType.PRIVATE_TRANSPORT)
        events = [
            make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 9), address="A"),
            make_intervention(datetime(2025, 1, 7, 12), datetime(2025, 1, 7, 13), address="B"),
        ]
        source = FakePayDataSource(
            workers=[worker],
            events=events,
            company=make_company(amount_per_km=0.5),
            known_matrices=[make_distance_matrix("A", "B", minutes=20, km=4, mode=TravelMode.DRIVING)],
        )

        [pay] = await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert source.calls == []
        assert pay.paid_km == 4
        assert pay.transport == pytest.approx(2)

    @pytest.mark.asyncio
    async def test_failure_propagates(self, calendar):
        worker = with_transport(make_worker(), TransportType.PRIVATE_TRANSPORT)
        events = [
            make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 9), address="A"),
            make_intervention(datetime(2025, 1, 7, 12), datetime(2025, 1, 7, 13), address="B"),
        ]
        source = FailingPayDataSource(workers=[worker], events=events)

        with pytest.raises(RuntimeError, match="distance provider unavailable"):
            await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

    @pytest.mark.asyncio
    async def test_workers_without_contract_are_not_loaded(self, calendar):
        ended = make_worker(id="worker-2", contracts=[make_contract(end_date=datetime(2024, 11, 30))])
        source = FakePayDataSource(workers=[make_worker(), ended], events=january_events())

        result = await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, today=TODAY)

        assert [pay.worker_id for pay in result] == ["worker-1"]
        assert source.event_requests == [["worker-1"], ["worker-1"]]

    @pytest.mark.asyncio
    async def test_previous_month_respects_concurrency(self, calendar):
        workers = [
            with_transport(make_worker(id=f"worker-{index}"), TransportType.PRIVATE_TRANSPORT)
            for index in range(1, 4)
        ]
        events = [
            event
            for index, worker in enumerate(workers)
            for event in (
                make_intervention(
                    datetime(2024, 12, 3, 8), datetime(2024, 12, 3, 9), worker_id=worker.id, address=f"A{index}"
                ),
                make_intervention(
                    datetime(2024, 12, 3, 12), datetime(2024, 12, 3, 13), worker_id=worker.id, address=f"B{index}"
                ),
            )
        ]
        source = SlowPayDataSource(workers=workers, events=events)

        await get_draft_pay(source, date(2025, 1, 1), date(2025, 1, 31), calendar, concurrency=1, today=TODAY)

        assert len(source.calls) == 3
        assert source.max_in_flight == 1
