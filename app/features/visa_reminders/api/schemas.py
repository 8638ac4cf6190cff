from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


class DispatchDetailResponse(BaseModel):
    reminder_id: str
    visa_country: str | None = None
    channel: str
    status: Literal["sent", "failed"]


class DispatchResultsResponse(BaseModel):
    total: int
    sent: int
    failed: int
    details: list[DispatchDetailResponse] = Field(default_factory=list)


class DispatchResponse(BaseModel):
    """Response for POST /reminders/dispatch"""

    message: str
    results: DispatchResultsResponse


class PlanningResponse(BaseModel):
    """Response for POST /reminders/plan"""

    created: int
    skipped_existing: int
    skipped_past: int
    failed: int


class ReminderResponse(BaseModel):
    id: str
    visa_id: str
    reminder_date: date
    days_before: int
    reminder_type: str
    channel: str
    is_sent: bool
    sent_at: datetime | None = None


class ReminderListResponse(BaseModel):
    """Response for GET /reminders"""

    reminders: list[ReminderResponse]
    count: int


class VisaRiskResponse(BaseModel):
    visa_id: str
    country: str
    expiry_date: date
    days_until_expiry: int
    level: Literal["expired", "expiring", "active"]


class VisaRiskListResponse(BaseModel):
    """Response for GET /reminders/visas/risk"""

    visas: list[VisaRiskResponse]
    expired: int
    expiring: int
