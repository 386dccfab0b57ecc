"""Pydantic API Schemas for CarePay."""

from backend.schemas.pay import (
    DraftPayResponse,
    PayPeriod,
    WorkingStatsResponse,
)

__all__ = [
    "PayPeriod",
    "DraftPayResponse",
    "WorkingStatsResponse",
]
