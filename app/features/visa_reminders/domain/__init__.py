"""
Domain subpackage for the visa reminder feature.
"""

from .expiry import assess_expiry_risk, days_until_expiry, reminder_date_for
from .models import (
    DELIVERABLE_CHANNELS,
    REMINDER_OFFSETS,
    Channel,
    DispatchDetail,
    DispatchResult,
    EntryType,
    ExpiryRisk,
    NotificationPreferences,
    PlannedOccurrence,
    PlanningResult,
    Profile,
    ReminderOccurrence,
    ReminderOffset,
    Visa,
    VisaCategory,
    VisaStatus,
)

__all__ = [
    "DELIVERABLE_CHANNELS",
    "REMINDER_OFFSETS",
    "Channel",
    "DispatchDetail",
    "DispatchResult",
    "EntryType",
    "ExpiryRisk",
    "NotificationPreferences",
    "PlannedOccurrence",
    "PlanningResult",
    "Profile",
    "ReminderOccurrence",
    "ReminderOffset",
    "Visa",
    "VisaCategory",
    "VisaStatus",
    "assess_expiry_risk",
    "days_until_expiry",
    "reminder_date_for",
]
