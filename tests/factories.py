"""
Test Factories

Helper functions for creating draft pay models in tests.
"""

from datetime import datetime
from uuid import uuid4

from engines.schemas.draft_pay import (
    AbsenceNature,
    Company,
    Contract,
    ContractStatus,
    ContractVersion,
    DistanceMatrix,
    EventType,
    ScheduledEvent,
    Service,
    ServiceVersion,
    SurchargeRule,
    TransportType,
    TravelMode,
    Worker,
    WorkerIdentity,
)

CONTRACT_START = datetime(2024, 1, 1)


def make_surcharge(**overrides) -> SurchargeRule:
    """Create a SurchargeRule with no surcharge enabled."""
    defaults = {
        "id": f"surcharge-{uuid4().hex[:8]}",
        "name": "Plan",
    }
    defaults.update(overrides)
    return SurchargeRule(**defaults)


def make_service(surcharge_id: str | None = None, exempt: bool = False, **overrides) -> Service:
    """Create an hourly Service with one version since the contract start."""
    defaults = {
        "id": f"service-{uuid4().hex[:8]}",
        "name": "Aide à la toilette",
        "nature": "hourly",
        "versions": [
            ServiceVersion(start_date=CONTRACT_START, surcharge_id=surcharge_id, exempt_from_charges=exempt)
        ],
    }
    defaults.update(overrides)
    return Service(**defaults)


def make_intervention(start: datetime, end: datetime, **overrides) -> ScheduledEvent:
    """Create an intervention event."""
    defaults = {
        "id": f"event-{uuid4().hex[:8]}",
        "type": EventType.INTERVENTION,
        "start_date": start,
        "end_date": end,
        "worker_id": "worker-1",
    }
    defaults.update(overrides)
    return ScheduledEvent(**defaults)


def make_internal_hour(start: datetime, end: datetime, **overrides) -> ScheduledEvent:
    """Create an internal hour event."""
    return make_intervention(start, end, type=EventType.INTERNAL_HOUR, **overrides)


def make_absence(
    start: datetime, end: datetime, nature: AbsenceNature = AbsenceNature.DAILY, **overrides
) -> ScheduledEvent:
    """Create an absence event."""
    return make_intervention(start, end, type=EventType.ABSENCE, absence_nature=nature, **overrides)


def make_contract(weekly_hours: float = 24, **overrides) -> Contract:
    """Create a company Contract with a single version."""
    start = overrides.pop("start_date", CONTRACT_START)
    defaults = {
        "id": f"contract-{uuid4().hex[:8]}",
        "status": ContractStatus.COMPANY_CONTRACT,
        "start_date": start,
        "end_date": None,
        "versions": [ContractVersion(start_date=start, weekly_hours=weekly_hours)],
    }
    defaults.update(overrides)
    return Contract(**defaults)


def make_worker(**overrides) -> Worker:
    """Create a Worker with one open company contract and no transport."""
    defaults = {
        "id": "worker-1",
        "identity": WorkerIdentity(firstname="Camille", lastname="Martin"),
        "sector": "sector-1",
        "transport_type": None,
        "contracts": [make_contract()],
    }
    defaults.update(overrides)
    return Worker(**defaults)


def make_company(**overrides) -> Company:
    """Create a Company with no refund configured."""
    defaults = {
        "id": "company-1",
        "name": "Aide à Domicile",
    }
    defaults.update(overrides)
    return Company(**defaults)


def make_distance_matrix(
    origins: str,
    destinations: str,
    minutes: float,
    km: float,
    mode: TravelMode = TravelMode.DRIVING,
) -> DistanceMatrix:
    """Create a DistanceMatrix from minutes and kilometers."""
    return DistanceMatrix(
        origins=origins,
        destinations=destinations,
        mode=mode,
        duration=minutes * 60,
        distance=km * 1000,
    )


def with_transport(worker: Worker, transport_type: TransportType, **overrides) -> Worker:
    """Copy of a worker with a transport type."""
    return worker.model_copy(update={"transport_type": transport_type, **overrides})
