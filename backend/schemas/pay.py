"""
Pay Pydantic Schemas

API request/response models for draft pay and hours balance endpoints.
"""

from datetime import date

from pydantic import BaseModel, Field

from engines.schemas.draft_pay import HoursBalanceDetail, PayRecord, SectorHoursToWork, WorkingStats

MONTH_PATTERN = r"^(0[1-9]|1[0-2])-\d{4}$"


class PayPeriod(BaseModel):
    """Whole days of a pay period, both included."""

    start_date: date = Field(..., description="First day of the period")
    end_date: date = Field(..., description="Last day of the period")


DraftPayResponse = list[PayRecord]

WorkingStatsResponse = dict[str, WorkingStats]

HoursBalanceDetailListResponse = list[HoursBalanceDetail]

HoursToWorkResponse = list[SectorHoursToWork]
