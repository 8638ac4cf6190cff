"""
Base class for reminder delivery channels.

Every channel answers one question: did this message reach the user? A
missing credential, a non-2xx response or a transport error all mean "no"
and are reported as False, never raised, so one broken channel cannot stop
a dispatch run.
"""

import abc

import httpx

from app.config import Settings, settings
from app.features.visa_reminders.domain import Profile, ReminderOccurrence, Visa
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ReminderChannel(abc.ABC):
    """One delivery medium (email, telegram, wechat)."""

    name: str = ""

    def __init__(
        self,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.CHANNEL_REQUEST_TIMEOUT,
            transport=self._transport,
        )

    @abc.abstractmethod
    def is_configured(self) -> bool:
        """Whether the service-level credentials for this channel are present."""

    @abc.abstractmethod
    async def _deliver(
        self, profile: Profile, visa: Visa, reminder: ReminderOccurrence, message: str
    ) -> bool:
        """Channel-specific delivery. May raise httpx errors; send() handles them."""

    async def send(
        self, profile: Profile, visa: Visa, reminder: ReminderOccurrence, message: str
    ) -> bool:
        if not self.is_configured():
            logger.warning(
                "Notification skipped: channel not configured",
                channel=self.name,
                reminder_id=reminder.id,
            )
            return False

        try:
            return await self._deliver(profile, visa, reminder, message)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                "Channel transport error",
                channel=self.name,
                reminder_id=reminder.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    def _log_response(self, response: httpx.Response, reminder: ReminderOccurrence) -> bool:
        if response.is_success:
            return True

        logger.warning(
            "Channel rejected message",
            channel=self.name,
            reminder_id=reminder.id,
            status_code=response.status_code,
            body=response.text[:300],
        )
        return False
