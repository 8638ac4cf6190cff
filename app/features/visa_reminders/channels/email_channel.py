"""
Email delivery through the Resend HTTP API.
"""

from app.features.visa_reminders.domain import Channel, Profile, ReminderOccurrence, Visa
from app.features.visa_reminders.services.messages import (
    render_email_html,
    render_email_subject,
)

from .base import ReminderChannel

RESEND_EMAILS_URL = "https://api.resend.com/emails"


class EmailChannel(ReminderChannel):
    name = Channel.EMAIL

    def is_configured(self) -> bool:
        return bool(self.config.RESEND_API_KEY)

    async def _deliver(
        self, profile: Profile, visa: Visa, reminder: ReminderOccurrence, message: str
    ) -> bool:
        payload = {
            "from": self.config.EMAIL_FROM,
            "to": [profile.email],
            "subject": render_email_subject(visa, reminder.days_before),
            "html": render_email_html(visa, message, self.config.app_url()),
        }
        headers = {"Authorization": f"Bearer {self.config.RESEND_API_KEY}"}

        async with self._client() as client:
            response = await client.post(RESEND_EMAILS_URL, json=payload, headers=headers)

        return self._log_response(response, reminder)
