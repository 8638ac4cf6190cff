"""
Reminder message rendering.

Everything here is a pure function of its inputs: no I/O, no clock. The
same plain-text message is reused by every channel; email and Telegram wrap
it in their own envelope.
"""

import html
from datetime import date

from app.features.visa_reminders.domain import Profile, Visa

SUPPORTED_LANGUAGES = ("en", "zh", "km")
DEFAULT_LANGUAGE = "en"

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# {name} recipient, {holder} possessive holder phrase, {country}, {visa_type},
# {days}, {expiry}
_TEMPLATES: dict[str, dict[str, str]] = {
    "en": {
        "today": (
            "Hello {name}! {holder} {country} {visa_type} visa expires TODAY! "
            "Please renew it immediately."
        ),
        "upcoming": (
            "Hello {name}! {holder} {country} {visa_type} visa will expire in {days} days "
            "({expiry}). Please renew it soon."
        ),
    },
    "zh": {
        "today": "您好 {name}，{holder}的{country}{visa_type}签证今天到期！请尽快办理续签。",
        "upcoming": (
            "您好 {name}，{holder}的{country}{visa_type}签证将在{days}天后（{expiry}）到期。"
            "请及时办理续签手续。"
        ),
    },
    "km": {
        "today": (
            "សួស្តី {name}! ទិដ្ឋាការ{visa_type}របស់{holder}សម្រាប់{country}ផុតកំណត់ថ្ងៃនេះ! "
            "សូមបន្តវាឱ្យបានឆាប់។"
        ),
        "upcoming": (
            "សួស្តី {name}! ទិដ្ឋាការ{visa_type}របស់{holder}សម្រាប់{country}"
            "នឹងផុតកំណត់ក្នុងរយៈពេល{days}ថ្ងៃ ({expiry})។ សូមបន្តវាឱ្យបានទាន់ពេល។"
        ),
    },
}

# Possessive used when the visa has no separately named holder.
_SELF_HOLDER = {"en": "Your", "zh": "您", "km": "អ្នក"}


def resolve_language(language_preference: str | None) -> str:
    lang = (language_preference or "").strip().lower()
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def format_expiry_date(value: date) -> str:
    """`March 10, 2025` regardless of process locale."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


def _holder_phrase(visa: Visa, lang: str) -> str:
    if not visa.person_name:
        return _SELF_HOLDER[lang]
    if lang == "en":
        return f"{visa.person_name}'s"
    return visa.person_name


def render_reminder_message(visa: Visa, profile: Profile, days_before: int) -> str:
    """Localized reminder text; offset 0 uses the urgent "expires today" template."""

    lang = resolve_language(profile.language_preference)
    template = _TEMPLATES[lang]["today" if days_before == 0 else "upcoming"]

    return template.format(
        name=profile.full_name or "User",
        holder=_holder_phrase(visa, lang),
        country=visa.country,
        visa_type=visa.visa_type,
        days=days_before,
        expiry=format_expiry_date(visa.expiry_date),
    )


def render_email_subject(visa: Visa, days_before: int) -> str:
    if days_before == 0:
        return f"⚠️ URGENT: {visa.country} Visa Expires Today!"
    return f"⏰ Reminder: {visa.country} Visa Expiring in {days_before} Days"


def render_email_html(visa: Visa, message: str, app_url: str) -> str:
    esc = html.escape

    detail_rows = [
        ("Country", visa.country),
        ("Type", visa.visa_type),
        ("Number", visa.visa_number),
        ("Expiry Date", format_expiry_date(visa.expiry_date)),
        ("Holder", visa.person_name),
    ]
    details = "\n".join(
        f'<p style="margin: 5px 0;"><strong>{label}:</strong> {esc(str(value))}</p>'
        for label, value in detail_rows
        if value
    )

    return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <div style="background: #667eea; padding: 30px; text-align: center;">
          <h1 style="color: white; margin: 0;">🛂 VisaTrack Reminder</h1>
        </div>
        <div style="padding: 30px; background: #f9fafb;">
          <p style="font-size: 16px; color: #374151;">{esc(message)}</p>
          <div style="background: white; border-radius: 8px; padding: 20px; margin: 20px 0; border-left: 4px solid #667eea;">
            <h3 style="margin-top: 0; color: #1f2937;">Visa Details:</h3>
            {details}
          </div>
          <div style="text-align: center; margin: 30px 0;">
            <a href="{esc(app_url, quote=True)}"
               style="background: #667eea; color: white; padding: 12px 30px; text-decoration: none; border-radius: 6px; display: inline-block;">
              Manage Visas
            </a>
          </div>
        </div>
        <div style="background: #1f2937; padding: 20px; text-align: center;">
          <p style="color: #9ca3af; font-size: 12px; margin: 0;">
            This is an automated reminder from VisaTrack. You can manage your notification preferences in settings.
          </p>
        </div>
      </div>
    """


def escape_telegram_markdown(value: str) -> str:
    """Backslash-escape the entity markers of Telegram's legacy Markdown."""
    for ch in "_*`[":
        value = value.replace(ch, f"\\{ch}")
    return value


def render_telegram_text(message: str) -> str:
    return f"🛂 *VisaTrack Reminder*\n\n{escape_telegram_markdown(message)}"
