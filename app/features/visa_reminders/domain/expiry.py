"""
Expiry arithmetic shared by the planner and the risk endpoint.
"""

from datetime import date, timedelta

from .models import ExpiryRisk, Visa, VisaStatus

EXPIRING_WINDOW_DAYS = 30


def reminder_date_for(expiry_date: date, days_before: int) -> date:
    return expiry_date - timedelta(days=days_before)


def days_until_expiry(expiry_date: date, today: date) -> int:
    return (expiry_date - today).days


def assess_expiry_risk(visa: Visa, today: date) -> ExpiryRisk:
    """
    Classify a visa by how close it is to expiry.

    - expired: status already expired, or the expiry date is today or past
    - expiring: 1..30 days left
    - active: more than 30 days left
    """
    days = days_until_expiry(visa.expiry_date, today)

    if visa.status == VisaStatus.EXPIRED or days <= 0:
        level = "expired"
    elif days <= EXPIRING_WINDOW_DAYS:
        level = "expiring"
    else:
        level = "active"

    return ExpiryRisk(
        visa_id=visa.id,
        country=visa.country,
        expiry_date=visa.expiry_date,
        days_until_expiry=days,
        level=level,
    )
