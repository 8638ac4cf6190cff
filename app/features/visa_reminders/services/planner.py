"""
Reminder planner.

Turns a user's visas and channel preferences into the canonical set of
reminder occurrences (7 days, 3 days and same day before expiry, one row per
channel) and persists the ones that do not exist yet. Runs after every visa
create/update and re-evaluates all of the user's visas.
"""

from datetime import UTC, date, datetime

from app.db.helpers import DatabaseError
from app.features.visa_reminders.domain import (
    REMINDER_OFFSETS,
    Channel,
    NotificationPreferences,
    PlannedOccurrence,
    PlanningResult,
    Visa,
    reminder_date_for,
)
from app.features.visa_reminders.repository import (
    ProfileRepository,
    ReminderRepository,
    VisaRepository,
)
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ReminderPlannerError(Exception):
    """Raised when the planner is invoked without the context it needs."""


def active_channels(preferences: NotificationPreferences) -> list[str]:
    """Email always, then telegram and wechat when enabled. SMS is never planned."""
    channels = [Channel.EMAIL.value]
    if preferences.telegram:
        channels.append(Channel.TELEGRAM.value)
    if preferences.wechat:
        channels.append(Channel.WECHAT.value)
    return channels


def compute_reminder_plan(
    visa: Visa, preferences: NotificationPreferences, today: date
) -> list[PlannedOccurrence]:
    """
    Occurrences that should exist for one visa, ignoring what is stored.

    Offsets whose reminder date is already behind `today` are dropped; the
    same-day offset survives until the expiry date itself has passed.
    """
    channels = active_channels(preferences)
    planned: list[PlannedOccurrence] = []

    for offset in REMINDER_OFFSETS:
        reminder_date = reminder_date_for(visa.expiry_date, offset.days_before)
        if reminder_date < today:
            continue
        planned.extend(
            PlannedOccurrence(
                visa_id=visa.id,
                user_id=visa.user_id,
                reminder_date=reminder_date,
                days_before=offset.days_before,
                reminder_type=offset.reminder_type,
                channel=channel,
            )
            for channel in channels
        )

    return planned


class ReminderPlanner:
    """Materializes planned occurrences exactly once per (visa, offset)."""

    def __init__(self, visas=VisaRepository, profiles=ProfileRepository, reminders=ReminderRepository):
        self.visas = visas
        self.profiles = profiles
        self.reminders = reminders

    async def plan_for_user(self, user_id: str, today: date | None = None) -> PlanningResult:
        """
        Ensure every visa the user owns has its reminder occurrences.

        Storage errors while reading visas or the profile propagate so the
        caller can retry; individual insert failures are logged and counted.
        """
        if not user_id:
            raise ReminderPlannerError("Reminder planning requires an owning user")

        today = today or datetime.now(UTC).date()
        result = PlanningResult()

        # Preferences are read once and shared by every visa in this run.
        profile = await self.profiles.get_profile(user_id)
        preferences = profile.preferences if profile else NotificationPreferences()
        visas = await self.visas.list_visas_for_user(user_id)

        for visa in visas:
            await self._plan_visa(visa, preferences, today, result)

        logger.info(
            "Reminder planning completed",
            user_id=user_id,
            visas=len(visas),
            today=today.isoformat(),
            **result.to_dict(),
        )
        return result

    async def _plan_visa(
        self,
        visa: Visa,
        preferences: NotificationPreferences,
        today: date,
        result: PlanningResult,
    ) -> None:
        planned = compute_reminder_plan(visa, preferences, today)
        result.skipped_past += sum(
            1
            for offset in REMINDER_OFFSETS
            if reminder_date_for(visa.expiry_date, offset.days_before) < today
        )

        by_offset: dict[int, list[PlannedOccurrence]] = {}
        for occurrence in planned:
            by_offset.setdefault(occurrence.days_before, []).append(occurrence)

        for days_before, occurrences in by_offset.items():
            if await self.reminders.exists_for_offset(visa.id, days_before):
                result.skipped_existing += 1
                continue

            for occurrence in occurrences:
                try:
                    created = await self.reminders.create_occurrence(occurrence)
                except DatabaseError as e:
                    result.failed += 1
                    logger.error(
                        "Failed to create reminder occurrence",
                        visa_id=visa.id,
                        days_before=days_before,
                        channel=occurrence.channel,
                        error=str(e),
                    )
                    continue
                if created:
                    result.created += 1


reminder_planner = ReminderPlanner()
