"""
Domain models for the visa reminder feature.

Plain dataclasses shared by repositories, services and the API layer. They
mirror the Supabase tables (`visas`, `profiles`, `reminders`) without any
database or HTTP specifics.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum


class Channel(StrEnum):
    EMAIL = "email"
    TELEGRAM = "telegram"
    WECHAT = "wechat"
    SMS = "sms"  # stored preference only, no delivery channel


# Channels the dispatcher knows how to deliver through.
DELIVERABLE_CHANNELS = frozenset({Channel.EMAIL, Channel.TELEGRAM, Channel.WECHAT})


class VisaCategory(StrEnum):
    TOURIST = "tourist"
    BUSINESS = "business"
    STUDENT = "student"
    WORK = "work"
    TRANSIT = "transit"
    OTHER = "other"
    PERSONAL = "personal"
    FAMILY = "family"
    EMPLOYEE = "employee"


class EntryType(StrEnum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    TRANSIT = "transit"


class VisaStatus(StrEnum):
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class ReminderOffset:
    """One fixed reminder window relative to the expiry date."""

    days_before: int
    reminder_type: str


# Ordered: advance warnings first, same-day final notice last.
REMINDER_OFFSETS: tuple[ReminderOffset, ...] = (
    ReminderOffset(days_before=7, reminder_type="7days"),
    ReminderOffset(days_before=3, reminder_type="3days"),
    ReminderOffset(days_before=0, reminder_type="same_day"),
)


@dataclass(slots=True)
class Visa:
    """A travel authorization owned by a user (row of `visas`)."""

    id: str
    user_id: str
    country: str
    visa_type: str
    expiry_date: date
    category: str = VisaCategory.PERSONAL
    visa_number: str | None = None
    issue_date: date | None = None
    entry_type: str = EntryType.SINGLE
    status: str = VisaStatus.ACTIVE
    person_name: str | None = None
    relationship: str | None = None
    photo_url: str | None = None


@dataclass(slots=True)
class NotificationPreferences:
    """Per-channel enable flags plus channel addressing from the profile."""

    email: bool = True
    telegram: bool = False
    wechat: bool = False
    sms: bool = False
    telegram_id: str | None = None
    wechat_id: str | None = None
    phone_number: str | None = None

    def is_enabled(self, channel: str) -> bool:
        try:
            key = Channel(channel).value
        except ValueError:
            return False
        return bool(getattr(self, key))


@dataclass(slots=True)
class Profile:
    """Owning user's profile (row of `profiles`)."""

    id: str
    email: str
    full_name: str | None = None
    language_preference: str = "en"
    preferences: NotificationPreferences = field(default_factory=NotificationPreferences)


@dataclass(slots=True)
class ReminderOccurrence:
    """One scheduled (date, channel) reminder for a visa (row of `reminders`)."""

    id: str
    visa_id: str
    user_id: str
    reminder_date: date
    days_before: int
    reminder_type: str
    channel: str
    is_sent: bool = False
    sent_at: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class PlannedOccurrence:
    """An occurrence the planner wants to exist, before it is persisted."""

    visa_id: str
    user_id: str
    reminder_date: date
    days_before: int
    reminder_type: str
    channel: str


@dataclass(slots=True)
class PlanningResult:
    created: int = 0
    skipped_existing: int = 0
    skipped_past: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "skipped_existing": self.skipped_existing,
            "skipped_past": self.skipped_past,
            "failed": self.failed,
        }


@dataclass(frozen=True, slots=True)
class DispatchDetail:
    reminder_id: str
    visa_country: str | None
    channel: str
    status: str  # "sent" or "failed"


@dataclass(slots=True)
class DispatchResult:
    """Per-run dispatch summary; `sent + failed == total` always holds."""

    total: int = 0
    sent: int = 0
    failed: int = 0
    details: list[DispatchDetail] = field(default_factory=list)
    message: str = "Reminders processed"

    def record_sent(self, reminder: ReminderOccurrence, visa_country: str | None) -> None:
        self.sent += 1
        self.details.append(
            DispatchDetail(reminder.id, visa_country, reminder.channel, "sent")
        )

    def record_failed(self, reminder: ReminderOccurrence, visa_country: str | None) -> None:
        self.failed += 1
        self.details.append(
            DispatchDetail(reminder.id, visa_country, reminder.channel, "failed")
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "sent": self.sent,
            "failed": self.failed,
            "details": [
                {
                    "reminder_id": d.reminder_id,
                    "visa_country": d.visa_country,
                    "channel": d.channel,
                    "status": d.status,
                }
                for d in self.details
            ],
        }


@dataclass(frozen=True, slots=True)
class ExpiryRisk:
    visa_id: str
    country: str
    expiry_date: date
    days_until_expiry: int
    level: str  # "expired", "expiring" or "active"
