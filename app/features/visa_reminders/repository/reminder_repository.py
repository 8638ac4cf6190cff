"""
Persistence for reminder occurrences (`reminders` table).

The table doubles as the work queue between the planner, which inserts
pending rows, and the dispatcher, which consumes due rows and flips
`is_sent`.
"""

from datetime import UTC, date, datetime

from app.db.helpers import execute_query, fetch_all, fetch_one, with_db_retry
from app.features.visa_reminders.domain import PlannedOccurrence, ReminderOccurrence
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ReminderRepository:
    REMINDER_SELECT_COLUMNS = """
        id, visa_id, user_id, reminder_date, days_before, reminder_type,
        channel, is_sent, sent_at, created_at
    """

    @classmethod
    def _row_to_reminder(cls, row: dict | None) -> ReminderOccurrence | None:
        if not row:
            return None

        return ReminderOccurrence(
            id=str(row["id"]),
            visa_id=str(row["visa_id"]),
            user_id=str(row["user_id"]),
            reminder_date=row["reminder_date"],
            days_before=int(row["days_before"]),
            reminder_type=row["reminder_type"],
            channel=row["channel"],
            is_sent=bool(row["is_sent"]),
            sent_at=row.get("sent_at"),
            created_at=row.get("created_at"),
        )

    @classmethod
    @with_db_retry(max_retries=3, base_delay=0.1)
    async def exists_for_offset(cls, visa_id: str, days_before: int) -> bool:
        """True when any channel already has an occurrence for (visa, offset)."""

        query = """
            SELECT 1 AS found
            FROM reminders
            WHERE visa_id = %s AND days_before = %s
            LIMIT 1
        """
        row = await fetch_one(query, (visa_id, days_before))
        return row is not None

    @classmethod
    async def create_occurrence(cls, planned: PlannedOccurrence) -> ReminderOccurrence | None:
        """
        Insert one pending occurrence.

        Returns None when a unique index on (visa_id, days_before, channel)
        rejected the row as a duplicate.
        """

        query = f"""
            INSERT INTO reminders (
                visa_id, user_id, reminder_date, days_before, reminder_type, channel, is_sent
            )
            VALUES (%s, %s, %s, %s, %s, %s, false)
            ON CONFLICT DO NOTHING
            RETURNING {cls.REMINDER_SELECT_COLUMNS}
        """
        params = (
            planned.visa_id,
            planned.user_id,
            planned.reminder_date,
            planned.days_before,
            planned.reminder_type,
            planned.channel,
        )
        row = await fetch_one(query, params)
        reminder = cls._row_to_reminder(row)
        if reminder:
            logger.info(
                "Reminder occurrence created",
                reminder_id=reminder.id,
                visa_id=planned.visa_id,
                days_before=planned.days_before,
                channel=planned.channel,
            )
        return reminder

    @classmethod
    @with_db_retry(max_retries=3, base_delay=0.1)
    async def list_due(cls, today: date) -> list[ReminderOccurrence]:
        """Unsent occurrences whose reminder_date is today or earlier."""

        query = f"""
            SELECT {cls.REMINDER_SELECT_COLUMNS}
            FROM reminders
            WHERE is_sent = false
              AND reminder_date <= %s
            ORDER BY reminder_date ASC, created_at ASC
        """
        rows = await fetch_all(query, (today,))
        return [cls._row_to_reminder(row) for row in rows]

    @classmethod
    @with_db_retry(max_retries=3, base_delay=0.1)
    async def list_for_user(cls, user_id: str) -> list[ReminderOccurrence]:
        query = f"""
            SELECT {cls.REMINDER_SELECT_COLUMNS}
            FROM reminders
            WHERE user_id = %s
            ORDER BY reminder_date ASC
        """
        rows = await fetch_all(query, (user_id,))
        return [cls._row_to_reminder(row) for row in rows]

    @classmethod
    async def mark_sent(cls, reminder_id: str, sent_at: datetime | None = None) -> bool:
        """
        Commit a delivery. Only flips rows that are still unsent.

        Returns False when another dispatch run already marked the row.
        """

        query = """
            UPDATE reminders
            SET is_sent = true,
                sent_at = %s
            WHERE id = %s AND is_sent = false
        """
        affected = await execute_query(query, (sent_at or datetime.now(UTC), reminder_id))
        return affected > 0
