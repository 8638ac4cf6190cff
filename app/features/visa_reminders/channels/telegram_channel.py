"""
Telegram delivery through the Bot API.
"""

from app.features.visa_reminders.domain import Channel, Profile, ReminderOccurrence, Visa
from app.features.visa_reminders.services.messages import render_telegram_text
from app.infrastructure.observability.logging import get_logger

from .base import ReminderChannel

logger = get_logger(__name__)

TELEGRAM_API_BASE_URL = "https://api.telegram.org"


class TelegramChannel(ReminderChannel):
    name = Channel.TELEGRAM

    def is_configured(self) -> bool:
        return bool(self.config.TELEGRAM_BOT_TOKEN)

    def _endpoint(self) -> str:
        return f"{TELEGRAM_API_BASE_URL}/bot{self.config.TELEGRAM_BOT_TOKEN}/sendMessage"

    async def _deliver(
        self, profile: Profile, visa: Visa, reminder: ReminderOccurrence, message: str
    ) -> bool:
        chat_id = profile.preferences.telegram_id
        if not chat_id:
            logger.warning("Telegram chat id missing", reminder_id=reminder.id, user_id=profile.id)
            return False

        payload = {
            "chat_id": chat_id,
            "text": render_telegram_text(message),
            "parse_mode": "Markdown",
        }

        async with self._client() as client:
            response = await client.post(self._endpoint(), json=payload)

        return self._log_response(response, reminder)
