"""SQLAlchemy ORM Models for CarePay."""

from backend.models.base import Base, TimestampMixin
from backend.models.company import Company
from backend.models.contract import Contract
from backend.models.distance_matrix import DistanceMatrix
from backend.models.event import Event
from backend.models.pay import Pay
from backend.models.service import Service
from backend.models.surcharge import Surcharge
from backend.models.worker import Worker

__all__ = [
    "Base",
    "TimestampMixin",
    "Company",
    "Worker",
    "Contract",
    "Service",
    "Surcharge",
    "Event",
    "DistanceMatrix",
    "Pay",
]
