from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Supabase settings
    SUPABASE_URL: str
    SUPABASE_JWKS_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str
    SUPABASE_DB_URL: str

    # Public app URL used in email call-to-action links
    APP_URL: str | None = None

    # Email (Resend)
    RESEND_API_KEY: str | None = None
    EMAIL_FROM: str = "VisaTrack <noreply@visatrack.app>"

    # Telegram bot
    TELEGRAM_BOT_TOKEN: str | None = None

    # WeChat official account
    WECHAT_APP_ID: str | None = None
    WECHAT_APP_SECRET: str | None = None
    WECHAT_TEMPLATE_ID: str | None = None

    CHANNEL_REQUEST_TIMEOUT: float = 10.0

    # =================================================================
    # REMINDER DISPATCH
    # =================================================================
    REMINDER_CRON_SECRET: str | None = None
    REMINDER_DISPATCH_ENABLED: bool = True
    REMINDER_DISPATCH_HOUR: int = 1  # UTC

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 8
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def jwks_url(self) -> str:
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        base = self.SUPABASE_URL.rstrip("/")
        return f"{base}/auth/v1/.well-known/jwks.json"

    def app_url(self) -> str:
        """Link target for "Manage Visas" buttons, falls back to the Supabase URL."""
        return (self.APP_URL or self.SUPABASE_URL).rstrip("/")

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update({"min_size": 1, "max_size": 4, "timeout": 15.0})

        return config

    def get_channel_config(self) -> dict:
        """Which delivery channels have credentials configured (no secrets returned)."""
        return {
            "email": bool(self.RESEND_API_KEY),
            "telegram": bool(self.TELEGRAM_BOT_TOKEN),
            "wechat": bool(self.WECHAT_APP_ID and self.WECHAT_APP_SECRET),
            "sms": False,
        }

    def get_dispatch_config(self) -> dict:
        return {
            "dispatch_enabled": self.REMINDER_DISPATCH_ENABLED,
            "dispatch_hour": self.REMINDER_DISPATCH_HOUR % 24,
        }


settings = Settings()
