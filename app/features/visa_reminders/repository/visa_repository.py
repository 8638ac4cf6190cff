"""
Read access to `visas` and `profiles` for the reminder engine.

Visa CRUD itself happens through the Supabase client in the web app; the
reminder engine only needs to look rows up.
"""

from app.db.helpers import fetch_all, fetch_one, with_db_retry
from app.features.visa_reminders.domain import NotificationPreferences, Profile, Visa
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class VisaRepository:
    VISA_SELECT_COLUMNS = """
        id, user_id, country, visa_type, visa_number, category,
        issue_date, expiry_date, entry_type, status,
        person_name, relationship, photo_url
    """

    @classmethod
    def _row_to_visa(cls, row: dict | None) -> Visa | None:
        if not row:
            return None

        return Visa(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            country=row["country"],
            visa_type=row["visa_type"],
            expiry_date=row["expiry_date"],
            category=row.get("category") or "personal",
            visa_number=row.get("visa_number"),
            issue_date=row.get("issue_date"),
            entry_type=row.get("entry_type") or "single",
            status=row.get("status") or "active",
            person_name=row.get("person_name"),
            relationship=row.get("relationship"),
            photo_url=row.get("photo_url"),
        )

    @classmethod
    @with_db_retry(max_retries=3, base_delay=0.1)
    async def get_visa(cls, visa_id: str) -> Visa | None:
        query = f"SELECT {cls.VISA_SELECT_COLUMNS} FROM visas WHERE id = %s"
        row = await fetch_one(query, (visa_id,))
        return cls._row_to_visa(row)

    @classmethod
    @with_db_retry(max_retries=3, base_delay=0.1)
    async def list_visas_for_user(cls, user_id: str) -> list[Visa]:
        query = f"""
            SELECT {cls.VISA_SELECT_COLUMNS}
            FROM visas
            WHERE user_id = %s
            ORDER BY expiry_date ASC
        """
        rows = await fetch_all(query, (user_id,))
        return [cls._row_to_visa(row) for row in rows]


class ProfileRepository:
    PROFILE_SELECT_COLUMNS = """
        id, email, full_name, language_preference,
        notification_email, notification_telegram, notification_wechat, notification_sms,
        telegram_id, wechat_id, phone_number
    """

    @classmethod
    def _row_to_profile(cls, row: dict | None) -> Profile | None:
        if not row:
            return None

        preferences = NotificationPreferences(
            email=row.get("notification_email") is not False,
            telegram=bool(row.get("notification_telegram")),
            wechat=bool(row.get("notification_wechat")),
            sms=bool(row.get("notification_sms")),
            telegram_id=row.get("telegram_id") or None,
            wechat_id=row.get("wechat_id") or None,
            phone_number=row.get("phone_number") or None,
        )
        return Profile(
            id=str(row["id"]),
            email=row["email"],
            full_name=row.get("full_name"),
            language_preference=row.get("language_preference") or "en",
            preferences=preferences,
        )

    @classmethod
    @with_db_retry(max_retries=3, base_delay=0.1)
    async def get_profile(cls, user_id: str) -> Profile | None:
        query = f"SELECT {cls.PROFILE_SELECT_COLUMNS} FROM profiles WHERE id = %s"
        row = await fetch_one(query, (user_id,))
        if not row:
            logger.info("Profile not found", user_id=user_id)
        return cls._row_to_profile(row)
