"""
Delivery channels for reminder occurrences.
"""

from app.config import Settings

from .base import ReminderChannel
from .email_channel import EmailChannel
from .telegram_channel import TelegramChannel
from .wechat_channel import WeChatChannel


def build_default_channels(config: Settings | None = None) -> dict[str, ReminderChannel]:
    """Channel registry keyed by the `reminders.channel` value."""
    channels = (EmailChannel(config), TelegramChannel(config), WeChatChannel(config))
    return {channel.name: channel for channel in channels}


__all__ = [
    "EmailChannel",
    "ReminderChannel",
    "TelegramChannel",
    "WeChatChannel",
    "build_default_channels",
]
