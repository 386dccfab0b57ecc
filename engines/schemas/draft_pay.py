"""
Draft Pay Schemas

Input/output models for the draft pay computation: scheduled events,
contracts, surcharge plans, per-event hour contributions, period totals,
month-over-month diffs and the assembled pay record.
"""

import calendar as month_calendar
from datetime import date, datetime, time, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

HOUR_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class EventType(str, Enum):
    """Kinds of planning events."""

    INTERVENTION = "intervention"
    INTERNAL_HOUR = "internal_hour"
    ABSENCE = "absence"


class AbsenceNature(str, Enum):
    """How an absence is counted."""

    DAILY = "daily"
    HOURLY = "hourly"


class TransportType(str, Enum):
    """Transport declared by a worker for their professional trips."""

    PUBLIC_TRANSPORT = "public_transport"
    PRIVATE_TRANSPORT = "private_transport"
    COMPANY_TRANSPORT = "company_transport"


class TravelMode(str, Enum):
    """Travel mode sent to the distance matrix provider."""

    TRANSIT = "transit"
    DRIVING = "driving"


class ContractStatus(str, Enum):
    """Employer of a contract."""

    COMPANY_CONTRACT = "company_contract"
    CUSTOMER_CONTRACT = "customer_contract"


class SurchargeKey(str, Enum):
    """Surcharge types of a surcharge plan."""

    TWENTY_FIFTH_OF_DECEMBER = "twenty_fifth_of_december"
    FIRST_OF_MAY = "first_of_may"
    PUBLIC_HOLIDAY = "public_holiday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    EVENING = "evening"
    CUSTOM = "custom"


class PayQuery(BaseModel):
    """Pay period boundaries (inclusive)."""

    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def check_range(self) -> "PayQuery":
        if self.end_date < self.start_date:
            raise ValueError(
                f"Pay period end {self.end_date.isoformat()} is before start {self.start_date.isoformat()}"
            )
        return self

    @classmethod
    def for_days(cls, start: date, end: date) -> "PayQuery":
        """Build a query covering whole days, from start of `start` to end of `end`."""
        return cls(
            start_date=datetime.combine(start, time.min),
            end_date=datetime.combine(end, time.max),
        )

    @classmethod
    def for_month(cls, month: str) -> "PayQuery":
        """Build a query covering a whole month given as MM-YYYY."""
        try:
            first_day = datetime.strptime(month, "%m-%Y").date()
        except ValueError as e:
            raise ValueError(f"Invalid month {month!r}, expected MM-YYYY") from e
        last_day = month_calendar.monthrange(first_day.year, first_day.month)[1]
        return cls.for_days(first_day, first_day.replace(day=last_day))

    @property
    def month(self) -> str:
        """Month label of the period (MM-YYYY)."""
        return self.start_date.strftime("%m-%Y")


# ── Planning ──────────────────────────────────────────


class ServiceVersion(BaseModel):
    """A dated version of a customer service."""

    start_date: datetime
    surcharge_id: str | None = Field(default=None, description="Surcharge plan applied to the service")
    exempt_from_charges: bool = False


class Service(BaseModel):
    """Service subscribed by a customer and performed during interventions."""

    id: str
    name: str = ""
    nature: str = Field(default="hourly", description="'hourly' or 'fixed'")
    versions: list[ServiceVersion] = Field(default_factory=list)


class ScheduledEvent(BaseModel):
    """One unit of planned work or absence of a worker."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: EventType
    start_date: datetime
    end_date: datetime
    worker_id: str
    address: str | None = Field(default=None, description="Full address where the event takes place")
    service: Service | None = None
    has_fixed_service: bool = False
    absence_nature: AbsenceNature | None = None

    @property
    def duration_minutes(self) -> int:
        """Whole minutes between start and end."""
        return int((self.end_date - self.start_date) / timedelta(minutes=1))


class WorkerEvents(BaseModel):
    """Events of one worker over a period: paid events grouped by day, and absences."""

    events: list[list[ScheduledEvent]] = Field(default_factory=list)
    absences: list[ScheduledEvent] = Field(default_factory=list)


# ── Contracts & company ───────────────────────────────


class ContractVersion(BaseModel):
    """A dated version of an employment contract."""

    start_date: datetime
    end_date: datetime | None = None
    weekly_hours: float = Field(..., ge=0)


class Contract(BaseModel):
    """Employment contract of a worker."""

    id: str
    status: ContractStatus = ContractStatus.COMPANY_CONTRACT
    start_date: datetime
    end_date: datetime | None = None
    versions: list[ContractVersion] = Field(default_factory=list)


class TransportSubsidy(BaseModel):
    """Monthly public transport pass price for a department."""

    department: str = Field(..., description="Two-digit department code")
    price: float = Field(..., ge=0)


class Company(BaseModel):
    """Employer HR configuration used by the draft pay."""

    id: str
    name: str = ""
    transport_subs: list[TransportSubsidy] | None = None
    amount_per_km: float | None = None
    fee_amount: float | None = None


class SurchargeRule(BaseModel):
    """
    Surcharge plan.

    Each percentage field, when positive, enables the matching surcharge.
    Evening and custom surcharges apply on a clock-time window (HH:MM).
    """

    id: str
    name: str
    saturday: float | None = None
    sunday: float | None = None
    public_holiday: float | None = None
    first_of_may: float | None = None
    twenty_fifth_of_december: float | None = None
    evening: float | None = None
    evening_start_time: str | None = Field(default=None, pattern=HOUR_PATTERN)
    evening_end_time: str | None = Field(default=None, pattern=HOUR_PATTERN)
    custom: float | None = None
    custom_start_time: str | None = Field(default=None, pattern=HOUR_PATTERN)
    custom_end_time: str | None = Field(default=None, pattern=HOUR_PATTERN)

    @model_validator(mode="after")
    def check_windows(self) -> "SurchargeRule":
        if self.evening and not (self.evening_start_time and self.evening_end_time):
            raise ValueError(f"Surcharge {self.id}: evening surcharge requires start and end times")
        if self.custom and not (self.custom_start_time and self.custom_end_time):
            raise ValueError(f"Surcharge {self.id}: custom surcharge requires start and end times")
        return self

    def percentage(self, key: SurchargeKey) -> float | None:
        return getattr(self, key.value)


class DistanceMatrix(BaseModel):
    """Trip between two addresses as returned by the distance provider."""

    origins: str
    destinations: str
    mode: TravelMode
    duration: float = Field(..., description="Seconds")
    distance: float = Field(..., description="Meters")


# ── Computation results ───────────────────────────────


class PaidTransport(BaseModel):
    """Paid trip preceding an event."""

    duration: float = Field(default=0, description="Minutes")
    distance: float = Field(default=0, description="Kilometers")


class SurchargeHours(BaseModel):
    hours: float
    percentage: float


class PlanSurchargeDetail(BaseModel):
    """Surcharged hours of one plan, by surcharge type."""

    plan_name: str
    surcharges: dict[SurchargeKey, SurchargeHours] = Field(default_factory=dict)


SurchargeDetails = dict[str, PlanSurchargeDetail]


class EventHours(BaseModel):
    """Hour contribution of a single event."""

    surcharged: float = 0
    not_surcharged: float = 0
    details: SurchargeDetails = Field(default_factory=dict)
    paid_km: float = 0
    paid_transport_hours: float = 0


class PaidHoursTotals(BaseModel):
    """Paid hours of one worker over one period."""

    worked_hours: float = 0
    internal_hours: float = 0
    not_surcharged_and_not_exempt: float = 0
    surcharged_and_not_exempt: float = 0
    not_surcharged_and_exempt: float = 0
    surcharged_and_exempt: float = 0
    surcharged_and_not_exempt_details: SurchargeDetails = Field(default_factory=dict)
    surcharged_and_exempt_details: SurchargeDetails = Field(default_factory=dict)
    paid_km: float = 0
    paid_transport_hours: float = 0


class MonthBalance(PaidHoursTotals):
    """Paid hours plus the balance against contractual hours."""

    contract_hours: float = 0
    holidays_hours: float = 0
    absences_hours: float = 0
    hours_to_work: float = 0
    hours_balance: float = 0
    transport: float = 0
    other_fees: float = 0


class PayDiff(BaseModel):
    """Signed corrections of the previous month once its events are final."""

    absences_hours: float = 0
    worked_hours: float = 0
    internal_hours: float = 0
    paid_transport_hours: float = 0
    not_surcharged_and_not_exempt: float = 0
    surcharged_and_not_exempt: float = 0
    surcharged_and_not_exempt_details: SurchargeDetails = Field(default_factory=dict)
    not_surcharged_and_exempt: float = 0
    surcharged_and_exempt: float = 0
    surcharged_and_exempt_details: SurchargeDetails = Field(default_factory=dict)
    hours_balance: float = 0


class PreviousPay(PaidHoursTotals):
    """Pay stored for the previous month."""

    month: str
    absences_hours: float = 0
    hours_balance: float = 0
    hours_counter: float = 0


class PrevPayDiff(BaseModel):
    """Diff of the previous month. `diff` is None when it was not computed."""

    worker_id: str
    diff: PayDiff | None = None
    hours_counter: float = 0


class WorkerIdentity(BaseModel):
    firstname: str = ""
    lastname: str = ""


class Worker(BaseModel):
    """Care worker to pay."""

    id: str
    identity: WorkerIdentity = Field(default_factory=WorkerIdentity)
    sector: str | None = None
    transport_type: TransportType | None = None
    transport_invoice_link: str | None = None
    zip_code: str | None = None
    has_mutual_fund: bool = False
    contracts: list[Contract] = Field(default_factory=list)
    prev_pay: PreviousPay | None = None


class PayRecord(MonthBalance):
    """Draft pay of a worker for a period."""

    worker_id: str
    worker: WorkerIdentity
    sector: str | None = None
    start_date: datetime
    end_date: datetime
    month: str
    overtime_hours: float = 0
    additional_hours: float = 0
    bonus: float = 0
    hours_counter: float = 0
    mutual: bool = True
    diff: PayDiff | None = None
    previous_month_hours_counter: float = 0


class WorkingStats(BaseModel):
    """Worked hours against hours to work over a week."""

    worked_hours: float
    hours_to_work: float


class HoursBalanceDetail(PayRecord):
    """
    Pay of a worker for one month as shown on the hours balance.

    The stored pay once the month is closed, otherwise a draft pay. The
    carried counter and the diff are only meaningful when the previous
    month was stored or the contract starts within the month.
    """

    sectors: list[str] = Field(default_factory=list)
    counter_and_diff_relevant: bool = False


class SectorHoursToWork(BaseModel):
    sector: str
    hours_to_work: float
