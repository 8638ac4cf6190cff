from datetime import date

from conftest import make_visa

from app.features.visa_reminders.domain import (
    assess_expiry_risk,
    days_until_expiry,
    reminder_date_for,
)


def test_reminder_date_for_offsets():
    expiry = date(2025, 3, 10)

    assert reminder_date_for(expiry, 7) == date(2025, 3, 3)
    assert reminder_date_for(expiry, 3) == date(2025, 3, 7)
    assert reminder_date_for(expiry, 0) == expiry


def test_reminder_date_crosses_month_boundary():
    assert reminder_date_for(date(2025, 3, 2), 7) == date(2025, 2, 23)


def test_days_until_expiry():
    assert days_until_expiry(date(2025, 3, 10), date(2025, 3, 1)) == 9
    assert days_until_expiry(date(2025, 3, 10), date(2025, 3, 12)) == -2


def test_risk_levels():
    today = date(2025, 3, 1)

    assert assess_expiry_risk(make_visa(expiry_date=date(2025, 3, 1)), today).level == "expired"
    assert assess_expiry_risk(make_visa(expiry_date=date(2025, 3, 2)), today).level == "expiring"
    assert assess_expiry_risk(make_visa(expiry_date=date(2025, 3, 31)), today).level == "expiring"
    assert assess_expiry_risk(make_visa(expiry_date=date(2025, 4, 1)), today).level == "active"


def test_expired_status_wins_over_date():
    visa = make_visa(expiry_date=date(2026, 1, 1), status="expired")

    risk = assess_expiry_risk(visa, date(2025, 3, 1))

    assert risk.level == "expired"
    assert risk.days_until_expiry > 30
