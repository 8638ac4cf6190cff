"""
Reminder dispatcher.

Consumes the `reminders` work queue: every unsent occurrence whose date has
arrived is resolved to its visa and owner, rendered, and pushed through its
channel. Occurrences are processed one at a time and a failure on one never
stops the rest of the run. Failed occurrences stay unsent and are picked up
again by the next run.
"""

from datetime import UTC, date, datetime

from app.db.helpers import DatabaseError
from app.features.visa_reminders.channels import ReminderChannel, build_default_channels
from app.features.visa_reminders.domain import (
    DELIVERABLE_CHANNELS,
    DispatchResult,
    Profile,
    ReminderOccurrence,
    Visa,
)
from app.features.visa_reminders.repository import (
    ProfileRepository,
    ReminderRepository,
    VisaRepository,
)
from app.infrastructure.observability.logging import get_logger, log_delivery_attempt

from .messages import render_reminder_message

logger = get_logger(__name__)

NO_REMINDERS_MESSAGE = "No reminders to send"
PROCESSED_MESSAGE = "Reminders processed"


class ReminderDispatchError(Exception):
    """Raised when the due-reminder selection itself cannot be loaded."""


class ReminderDispatcher:
    def __init__(
        self,
        channels: dict[str, ReminderChannel] | None = None,
        visas=VisaRepository,
        profiles=ProfileRepository,
        reminders=ReminderRepository,
    ):
        self.channels = channels if channels is not None else build_default_channels()
        self.visas = visas
        self.profiles = profiles
        self.reminders = reminders

    async def dispatch(self, today: date | None = None) -> DispatchResult:
        """
        Deliver every due, unsent occurrence.

        Raises:
            ReminderDispatchError: the due selection query failed
        """
        today = today or datetime.now(UTC).date()

        try:
            due = await self.reminders.list_due(today)
        except DatabaseError as e:
            logger.error("Failed to load due reminders", today=today.isoformat(), error=str(e))
            raise ReminderDispatchError(f"Could not load due reminders: {e}") from e

        result = DispatchResult(total=len(due))
        if not due:
            result.message = NO_REMINDERS_MESSAGE
            logger.info("No reminders to send", today=today.isoformat())
            return result

        logger.info("Dispatching reminders", today=today.isoformat(), total=len(due))

        for reminder in due:
            try:
                await self._process(reminder, result)
            except Exception as e:
                # Visa/profile lookup failed; keep the run going.
                logger.exception(
                    "Error processing reminder", reminder_id=reminder.id, error=str(e)
                )
                result.record_failed(reminder, None)

        result.message = PROCESSED_MESSAGE
        logger.info(
            "Reminder dispatch completed",
            today=today.isoformat(),
            total=result.total,
            sent=result.sent,
            failed=result.failed,
        )
        return result

    async def _process(self, reminder: ReminderOccurrence, result: DispatchResult) -> None:
        visa = await self.visas.get_visa(reminder.visa_id)
        profile = await self.profiles.get_profile(reminder.user_id)

        if not visa or not profile:
            logger.warning(
                "Reminder references missing visa or profile",
                reminder_id=reminder.id,
                visa_found=bool(visa),
                profile_found=bool(profile),
            )
            result.record_failed(reminder, visa.country if visa else None)
            return

        try:
            sent = await self._deliver(reminder, visa, profile)
        except Exception as e:
            logger.exception("Error delivering reminder", reminder_id=reminder.id, error=str(e))
            log_delivery_attempt(reminder.channel, reminder.id, False, error=str(e))
            result.record_failed(reminder, visa.country)
            return

        if sent and await self._commit_sent(reminder):
            result.record_sent(reminder, visa.country)
        else:
            result.record_failed(reminder, visa.country)

    async def _deliver(self, reminder: ReminderOccurrence, visa: Visa, profile: Profile) -> bool:
        message = render_reminder_message(visa, profile, reminder.days_before)

        sent = False
        channel = self._resolve_channel(reminder, profile)
        if channel is not None:
            sent = await channel.send(profile, visa, reminder, message)
        log_delivery_attempt(reminder.channel, reminder.id, sent)
        return sent

    def _resolve_channel(
        self, reminder: ReminderOccurrence, profile: Profile
    ) -> ReminderChannel | None:
        """Channel to deliver through, or None when delivery must not be attempted."""
        if reminder.channel not in DELIVERABLE_CHANNELS:
            logger.info(
                "Reminder channel not supported", reminder_id=reminder.id, channel=reminder.channel
            )
            return None

        # Preferences are checked now, not at planning time.
        if not profile.preferences.is_enabled(reminder.channel):
            logger.info(
                "Reminder channel disabled by user",
                reminder_id=reminder.id,
                channel=reminder.channel,
            )
            return None

        return self.channels.get(reminder.channel)

    async def _commit_sent(self, reminder: ReminderOccurrence) -> bool:
        try:
            updated = await self.reminders.mark_sent(reminder.id, datetime.now(UTC))
        except DatabaseError as e:
            logger.error(
                "Delivered reminder could not be marked sent",
                reminder_id=reminder.id,
                error=str(e),
            )
            return False

        if not updated:
            logger.warning("Reminder already marked sent by another run", reminder_id=reminder.id)
        return True


reminder_dispatcher: ReminderDispatcher | None = None


def get_reminder_dispatcher() -> ReminderDispatcher:
    """Lazily build the shared dispatcher so channel config is read after startup."""
    global reminder_dispatcher
    if reminder_dispatcher is None:
        reminder_dispatcher = ReminderDispatcher()
    return reminder_dispatcher
