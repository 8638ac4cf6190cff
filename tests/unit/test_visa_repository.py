from app.features.visa_reminders.repository import ProfileRepository


def _profile_row(**overrides) -> dict:
    row = {
        "id": "user-123",
        "email": "traveler@example.com",
        "full_name": "Sok Dara",
        "language_preference": None,
        "notification_email": None,
        "notification_telegram": None,
        "notification_wechat": True,
        "notification_sms": None,
        "telegram_id": "",
        "wechat_id": "openid",
        "phone_number": None,
    }
    row.update(overrides)
    return row


def test_null_email_flag_keeps_email_enabled():
    profile = ProfileRepository._row_to_profile(_profile_row())

    assert profile.preferences.email is True
    assert profile.preferences.is_enabled("email") is True


def test_explicitly_disabled_email_flag_is_respected():
    profile = ProfileRepository._row_to_profile(_profile_row(notification_email=False))

    assert profile.preferences.email is False


def test_profile_row_mapping_defaults():
    profile = ProfileRepository._row_to_profile(_profile_row())

    assert profile.language_preference == "en"
    assert profile.preferences.telegram is False
    assert profile.preferences.telegram_id is None
    assert profile.preferences.wechat is True
    assert profile.preferences.wechat_id == "openid"


def test_missing_profile_row_maps_to_none():
    assert ProfileRepository._row_to_profile(None) is None
