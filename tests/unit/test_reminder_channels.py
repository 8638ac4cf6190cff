import json
from datetime import date

import httpx
import pytest
from conftest import make_profile, make_visa

from app.config import settings
from app.features.visa_reminders.channels import (
    EmailChannel,
    TelegramChannel,
    WeChatChannel,
    build_default_channels,
)
from app.features.visa_reminders.domain import NotificationPreferences, ReminderOccurrence
from app.features.visa_reminders.services.messages import render_reminder_message


def _reminder(channel: str, days_before: int = 3) -> ReminderOccurrence:
    return ReminderOccurrence(
        id="rem-1",
        visa_id="visa-1",
        user_id="user-123",
        reminder_date=date(2025, 3, 7),
        days_before=days_before,
        reminder_type="3days",
        channel=channel,
    )


def _config(**overrides):
    return settings.model_copy(update=overrides)


@pytest.mark.asyncio
async def test_email_channel_posts_to_resend():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email-1"})

    channel = EmailChannel(
        _config(RESEND_API_KEY="re_test", APP_URL="https://app.example.com"),
        transport=httpx.MockTransport(handler),
    )

    ok = await channel.send(make_profile(), make_visa(), _reminder("email"), "hello")

    assert ok is True
    assert captured["url"] == "https://api.resend.com/emails"
    assert captured["body"]["to"] == ["traveler@example.com"]
    assert captured["body"]["subject"] == "⏰ Reminder: Thailand Visa Expiring in 3 Days"
    assert "https://app.example.com" in captured["body"]["html"]


@pytest.mark.asyncio
async def test_email_channel_non_2xx_is_failure():
    channel = EmailChannel(
        _config(RESEND_API_KEY="re_test"),
        transport=httpx.MockTransport(lambda request: httpx.Response(422, json={"error": "bad"})),
    )

    assert await channel.send(make_profile(), make_visa(), _reminder("email"), "hello") is False


@pytest.mark.asyncio
async def test_transport_error_is_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    channel = EmailChannel(
        _config(RESEND_API_KEY="re_test"), transport=httpx.MockTransport(handler)
    )

    assert await channel.send(make_profile(), make_visa(), _reminder("email"), "hello") is False


@pytest.mark.asyncio
async def test_telegram_channel_sends_markdown_to_chat():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    channel = TelegramChannel(
        _config(TELEGRAM_BOT_TOKEN="123:abc"), transport=httpx.MockTransport(handler)
    )
    profile = make_profile(preferences=NotificationPreferences(telegram=True, telegram_id="42"))

    ok = await channel.send(profile, make_visa(), _reminder("telegram"), "hello")

    assert ok is True
    assert captured["url"] == "https://api.telegram.org/bot123:abc/sendMessage"
    assert captured["body"] == {
        "chat_id": "42",
        "text": "🛂 *VisaTrack Reminder*\n\nhello",
        "parse_mode": "Markdown",
    }


@pytest.mark.asyncio
async def test_telegram_channel_without_chat_id_is_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    channel = TelegramChannel(
        _config(TELEGRAM_BOT_TOKEN="123:abc"), transport=httpx.MockTransport(handler)
    )
    profile = make_profile(preferences=NotificationPreferences(telegram=True))

    assert await channel.send(profile, make_visa(), _reminder("telegram"), "hello") is False


def _wechat_handler(send_response: httpx.Response, seen: list):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/cgi-bin/token":
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 7200})
        return send_response

    return handler


@pytest.mark.asyncio
async def test_wechat_channel_fetches_token_then_sends_template():
    seen: list[httpx.Request] = []
    channel = WeChatChannel(
        _config(WECHAT_APP_ID="wx1", WECHAT_APP_SECRET="secret", WECHAT_TEMPLATE_ID="tpl"),
        transport=httpx.MockTransport(
            _wechat_handler(httpx.Response(200, json={"errcode": 0, "errmsg": "ok"}), seen)
        ),
    )
    profile = make_profile(preferences=NotificationPreferences(wechat=True, wechat_id="openid"))

    ok = await channel.send(profile, make_visa(), _reminder("wechat"), "hello")

    assert ok is True
    assert seen[0].url.params["appid"] == "wx1"
    assert seen[1].url.params["access_token"] == "tok"
    body = json.loads(seen[1].content)
    assert body["touser"] == "openid"
    assert body["template_id"] == "tpl"
    assert body["data"]["keyword1"]["value"] == "hello"


@pytest.mark.asyncio
async def test_wechat_errcode_is_failure():
    seen: list[httpx.Request] = []
    channel = WeChatChannel(
        _config(WECHAT_APP_ID="wx1", WECHAT_APP_SECRET="secret"),
        transport=httpx.MockTransport(
            _wechat_handler(httpx.Response(200, json={"errcode": 40003, "errmsg": "bad"}), seen)
        ),
    )
    profile = make_profile(preferences=NotificationPreferences(wechat=True, wechat_id="openid"))

    assert await channel.send(profile, make_visa(), _reminder("wechat"), "hello") is False


@pytest.mark.asyncio
async def test_unconfigured_channels_report_failure():
    config = _config(RESEND_API_KEY=None, TELEGRAM_BOT_TOKEN=None, WECHAT_APP_ID=None)
    profile = make_profile(
        preferences=NotificationPreferences(
            telegram=True, wechat=True, telegram_id="42", wechat_id="openid"
        )
    )

    for name, channel in build_default_channels(config).items():
        assert channel.is_configured() is False
        assert await channel.send(profile, make_visa(), _reminder(name), "hello") is False


def test_default_registry_covers_deliverable_channels():
    assert set(build_default_channels()) == {"email", "telegram", "wechat"}


@pytest.mark.asyncio
async def test_telegram_channel_escapes_user_supplied_markdown():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    channel = TelegramChannel(
        _config(TELEGRAM_BOT_TOKEN="123:abc"), transport=httpx.MockTransport(handler)
    )
    profile = make_profile(
        full_name="sok_dara",
        preferences=NotificationPreferences(telegram=True, telegram_id="42"),
    )
    visa = make_visa(person_name="Mary_Ann", visa_type="B*1")
    message = render_reminder_message(visa, profile, 3)

    ok = await channel.send(profile, visa, _reminder("telegram"), message)

    assert ok is True
    text = captured["body"]["text"]
    assert text.startswith("🛂 *VisaTrack Reminder*\n\n")
    body = text.split("\n\n", 1)[1]
    assert "sok\\_dara" in body
    assert "Mary\\_Ann's" in body
    assert "B\\*1" in body
    assert body.replace("\\_", "").replace("\\*", "").count("_") == 0
    assert body.replace("\\_", "").replace("\\*", "").count("*") == 0
