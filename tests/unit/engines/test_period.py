"""
Period Aggregator Unit Tests

Tests for paid hours over a period, absences, refunds and the balance
against contractual hours.
"""

from datetime import date, datetime

import pytest

from engines.schemas.draft_pay import (
    AbsenceNature,
    PayQuery,
    SurchargeKey,
    TransportSubsidy,
    TransportType,
    TravelMode,
    WorkerEvents,
)
from engines.services.contracts import WEEKS_PER_MONTH
from engines.services.period import (
    clamp_event,
    compute_balance,
    filter_absences_for_contract,
    filter_events_for_contract,
    get_other_fees,
    get_pay_from_absences,
    get_pay_from_events,
    get_transport_refund,
)
from engines.services.transport import DistanceCache
from tests.fakes import FakeDistanceLookup
from tests.factories import (
    make_absence,
    make_company,
    make_contract,
    make_distance_matrix,
    make_internal_hour,
    make_intervention,
    make_service,
    make_surcharge,
    make_worker,
    with_transport,
)

JANUARY = PayQuery.for_days(date(2025, 1, 1), date(2025, 1, 31))

# ---------------------------------------------------------------------------
# Paid hours from events
# ---------------------------------------------------------------------------


class TestPayFromEvents:
    """Test accumulation of event hours."""

    @pytest.mark.asyncio
    async def test_sunday_intervention(self, calendar, distances):
        """Sunday 10:00-12:00, 25% Sunday surcharge, no transport."""
        surcharge = make_surcharge(id="s1", name="Plan", sunday=25)
        event = make_intervention(
            datetime(2025, 1, 5, 10), datetime(2025, 1, 5, 12), service=make_service(surcharge_id="s1")
        )

        totals = await get_pay_from_events([[event]], make_worker(), distances, [surcharge], JANUARY, calendar)

        assert totals.surcharged_and_not_exempt == pytest.approx(2.0)
        assert totals.not_surcharged_and_not_exempt == 0
        assert totals.worked_hours == pytest.approx(2.0)
        detail = totals.surcharged_and_not_exempt_details["s1"]
        assert detail.plan_name == "Plan"
        assert detail.surcharges[SurchargeKey.SUNDAY].hours == pytest.approx(2.0)
        assert detail.surcharges[SurchargeKey.SUNDAY].percentage == 25

    @pytest.mark.asyncio
    async def test_exempt_service(self, calendar, distances):
        surcharge = make_surcharge(id="s1", sunday=25)
        event = make_intervention(
            datetime(2025, 1, 5, 10), datetime(2025, 1, 5, 12), service=make_service(surcharge_id="s1", exempt=True)
        )

        totals = await get_pay_from_events([[event]], make_worker(), distances, [surcharge], JANUARY, calendar)

        assert totals.surcharged_and_exempt == pytest.approx(2.0)
        assert totals.surcharged_and_not_exempt == 0
        assert "s1" in totals.surcharged_and_exempt_details
        assert totals.surcharged_and_not_exempt_details == {}

    @pytest.mark.asyncio
    async def test_events_of_day_are_sorted_for_transport(self, calendar):
        """The trip is paid from the earlier event even when listed after."""
        lookup = FakeDistanceLookup([make_distance_matrix("A", "B", minutes=20, km=4)])
        worker = with_transport(make_worker(), TransportType.PRIVATE_TRANSPORT)
        first = make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 9), address="A")
        second = make_intervention(datetime(2025, 1, 7, 12), datetime(2025, 1, 7, 13), address="B")

        totals = await get_pay_from_events(
            [[second, first]], worker, DistanceCache(lookup), [], JANUARY, calendar
        )

        assert totals.worked_hours == pytest.approx(2 + 20 / 60)
        assert totals.paid_km == 4
        assert lookup.calls == [("A", "B", TravelMode.DRIVING)]

    @pytest.mark.asyncio
    async def test_no_trip_between_days(self, calendar):
        lookup = FakeDistanceLookup([make_distance_matrix("A", "B", minutes=20, km=4)])
        worker = with_transport(make_worker(), TransportType.PRIVATE_TRANSPORT)
        monday = make_intervention(datetime(2025, 1, 6, 8), datetime(2025, 1, 6, 9), address="A")
        tuesday = make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 9), address="B")

        totals = await get_pay_from_events(
            [[monday], [tuesday]], worker, DistanceCache(lookup), [], JANUARY, calendar
        )

        assert totals.worked_hours == pytest.approx(2)
        assert lookup.calls == []

    @pytest.mark.asyncio
    async def test_fixed_service_is_skipped(self, calendar, distances):
        fixed = make_intervention(
            datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 9), service=make_service(nature="fixed"), has_fixed_service=True
        )
        hourly = make_intervention(datetime(2025, 1, 7, 10), datetime(2025, 1, 7, 11))

        totals = await get_pay_from_events([[fixed, hourly]], make_worker(), distances, [], JANUARY, calendar)

        assert totals.worked_hours == pytest.approx(1)

    @pytest.mark.asyncio
    async def test_internal_hours(self, calendar, distances):
        internal = make_internal_hour(datetime(2025, 1, 7, 17), datetime(2025, 1, 7, 18, 30))
        intervention = make_intervention(datetime(2025, 1, 7, 9), datetime(2025, 1, 7, 10))

        totals = await get_pay_from_events(
            [[intervention, internal]], make_worker(), distances, [], JANUARY, calendar
        )

        assert totals.internal_hours == pytest.approx(1.5)
        assert totals.worked_hours == pytest.approx(2.5)

    @pytest.mark.asyncio
    async def test_event_is_clamped_to_query(self, calendar, distances):
        """Only the part after New Year's midnight is paid in January."""
        event = make_intervention(datetime(2024, 12, 31, 23), datetime(2025, 1, 1, 1))

        totals = await get_pay_from_events([[event]], make_worker(), distances, [], JANUARY, calendar)

        assert totals.worked_hours == pytest.approx(1)

    @pytest.mark.asyncio
    async def test_worked_hours_is_sum_of_buckets(self, calendar, distances):
        surcharge = make_surcharge(id="s1", sunday=25, evening=10, evening_start_time="19:00", evening_end_time="22:00")
        events = [
            [make_intervention(datetime(2025, 1, 5, 10), datetime(2025, 1, 5, 12), service=make_service(surcharge_id="s1"))],
            [
                make_intervention(
                    datetime(2025, 1, 7, 18), datetime(2025, 1, 7, 20), service=make_service(surcharge_id="s1", exempt=True)
                ),
                make_internal_hour(datetime(2025, 1, 7, 21), datetime(2025, 1, 7, 22)),
            ],
        ]

        totals = await get_pay_from_events(events, make_worker(), distances, [surcharge], JANUARY, calendar)

        assert totals.worked_hours == pytest.approx(
            totals.surcharged_and_not_exempt
            + totals.not_surcharged_and_not_exempt
            + totals.surcharged_and_exempt
            + totals.not_surcharged_and_exempt
        )
        assert totals.worked_hours == pytest.approx(5)
        assert totals.surcharged_and_exempt == pytest.approx(1)

    def test_clamp_keeps_event_inside_query(self):
        event = make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 9))

        assert clamp_event(event, JANUARY) == event


# ---------------------------------------------------------------------------
# Absences
# ---------------------------------------------------------------------------


class TestPayFromAbsences:
    """Test absence hours."""

    def test_daily_absence_three_business_days(self, calendar):
        """Monday to Wednesday with 24 h/week: 3 x 24 / 6 = 12 hours."""
        absence = make_absence(datetime(2025, 1, 13), datetime(2025, 1, 15, 23, 59))

        hours = get_pay_from_absences([absence], make_contract(weekly_hours=24), JANUARY, calendar)

        assert hours == pytest.approx(12)

    def test_daily_absence_skips_sunday(self, calendar):
        """Friday to Monday counts Friday, Saturday and Monday."""
        absence = make_absence(datetime(2025, 1, 3), datetime(2025, 1, 6, 23, 59))

        hours = get_pay_from_absences([absence], make_contract(weekly_hours=24), JANUARY, calendar)

        assert hours == pytest.approx(12)

    def test_daily_absence_skips_public_holiday(self, calendar):
        absence = make_absence(datetime(2025, 1, 1), datetime(2025, 1, 2, 23, 59))

        hours = get_pay_from_absences([absence], make_contract(weekly_hours=24), JANUARY, calendar)

        assert hours == pytest.approx(4)

    def test_daily_absence_clamped_to_query(self, calendar):
        absence = make_absence(datetime(2024, 12, 30), datetime(2025, 1, 2, 23, 59))

        hours = get_pay_from_absences([absence], make_contract(weekly_hours=24), JANUARY, calendar)

        assert hours == pytest.approx(4)

    def test_daily_absence_clamped_to_contract_end(self, calendar):
        contract = make_contract(weekly_hours=24, end_date=datetime(2025, 1, 14, 23, 59))
        absence = make_absence(datetime(2025, 1, 13), datetime(2025, 1, 17, 23, 59))

        hours = get_pay_from_absences([absence], contract, JANUARY, calendar)

        assert hours == pytest.approx(8)

    def test_hourly_absence_counts_duration(self, calendar):
        absence = make_absence(datetime(2025, 1, 13, 9), datetime(2025, 1, 13, 11, 30), nature=AbsenceNature.HOURLY)

        hours = get_pay_from_absences([absence], make_contract(), JANUARY, calendar)

        assert hours == pytest.approx(2.5)

# ---------------------------------------------------------------------------
# Refunds
# ---------------------------------------------------------------------------


class TestTransportRefund:
    """Test transport refund by transport type."""

    @pytest.fixture
    def company(self):
        return make_company(
            transport_subs=[TransportSubsidy(department="75", price=80)],
            amount_per_km=0.35,
        )

    def test_public_transport_half_pass(self, company):
        worker = with_transport(
            make_worker(), TransportType.PUBLIC_TRANSPORT, zip_code="75011", transport_invoice_link="https://x/pass.pdf"
        )

        assert get_transport_refund(worker, company, 0.5, 0) == pytest.approx(20)

    def test_public_transport_without_invoice(self, company):
        worker = with_transport(make_worker(), TransportType.PUBLIC_TRANSPORT, zip_code="75011")

        assert get_transport_refund(worker, company, 1, 0) == 0

    def test_public_transport_unknown_department(self, company):
        worker = with_transport(
            make_worker(), TransportType.PUBLIC_TRANSPORT, zip_code="69003", transport_invoice_link="https://x/pass.pdf"
        )

        assert get_transport_refund(worker, company, 1, 0) == 0

    def test_private_transport_mileage(self, company):
        worker = with_transport(make_worker(), TransportType.PRIVATE_TRANSPORT)

        assert get_transport_refund(worker, company, 1, 12.5) == pytest.approx(4.375)

    def test_company_transport(self, company):
        worker = with_transport(make_worker(), TransportType.COMPANY_TRANSPORT)

        assert get_transport_refund(worker, company, 1, 12.5) == 0

    def test_missing_company(self):
        worker = with_transport(make_worker(), TransportType.PRIVATE_TRANSPORT)

        assert get_transport_refund(worker, None, 1, 12.5) == 0

    def test_other_fees_prorated(self):
        assert get_other_fees(make_company(fee_amount=20), 0.5) == pytest.approx(10)
        assert get_other_fees(make_company(), 0.5) == 0
        assert get_other_fees(None, 1) == 0

# ---------------------------------------------------------------------------
# Contract filters and balance
# ---------------------------------------------------------------------------


class TestContractFilters:
    def test_events_before_contract_are_dropped(self):
        contract = make_contract(start_date=datetime(2025, 1, 15))
        before = [make_intervention(datetime(2025, 1, 10, 8), datetime(2025, 1, 10, 9))]
        after = [make_intervention(datetime(2025, 1, 20, 8), datetime(2025, 1, 20, 9))]

        assert filter_events_for_contract([before, after, []], contract) == [after]

    def test_events_after_contract_end_are_dropped(self):
        contract = make_contract(end_date=datetime(2025, 1, 15))
        last_day = [make_intervention(datetime(2025, 1, 15, 18), datetime(2025, 1, 15, 19))]
        after = [make_intervention(datetime(2025, 1, 16, 8), datetime(2025, 1, 16, 9))]

        assert filter_events_for_contract([last_day, after], contract) == [last_day]

    def test_absence_overlapping_contract_start(self):
        contract = make_contract(start_date=datetime(2025, 1, 15))
        overlapping = make_absence(datetime(2025, 1, 14), datetime(2025, 1, 16, 23, 59))
        before = make_absence(datetime(2025, 1, 6), datetime(2025, 1, 7, 23, 59))

        assert filter_absences_for_contract([overlapping, before], contract) == [overlapping]


class TestBalance:
    """Test balance against contractual hours."""

    @pytest.mark.asyncio
    async def test_balance_of_month(self, calendar, distances):
        """24 h/week in January: 104 h of contract, 4 h of holiday, 2 h worked."""
        events = WorkerEvents(events=[[make_intervention(datetime(2025, 1, 7, 8), datetime(2025, 1, 7, 10))]])

        balance = await compute_balance(
            make_worker(), make_contract(weekly_hours=24), events, make_company(fee_amount=20), JANUARY, distances, [], calendar
        )

        assert balance.contract_hours == pytest.approx(24 * WEEKS_PER_MONTH)
        assert balance.holidays_hours == pytest.approx(4)
        assert balance.hours_to_work == pytest.approx(24 * WEEKS_PER_MONTH - 4)
        assert balance.hours_balance == pytest.approx(2 - (24 * WEEKS_PER_MONTH - 4))
        assert balance.other_fees == pytest.approx(20)
        assert balance.transport == 0

    @pytest.mark.asyncio
    async def test_hours_to_work_is_never_negative(self, calendar, distances):
        """Absent the whole month: absences exceed contract hours."""
        events = WorkerEvents(absences=[make_absence(datetime(2025, 1, 1), datetime(2025, 1, 31, 23, 59))])

        balance = await compute_balance(
            make_worker(), make_contract(weekly_hours=24), events, None, JANUARY, distances, [], calendar
        )

        assert balance.absences_hours == pytest.approx(26 * 4)
        assert balance.hours_to_work == 0
        assert balance.hours_balance == 0
