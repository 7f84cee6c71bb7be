"""
Application configuration using Pydantic Settings
"""
from datetime import date, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Database (key-value blob store lives here)
    DATABASE_URL: str = "sqlite:///./subtracker.db"

    # Application (TIMEZONE decides "today" and the reminder sweep time)
    TIMEZONE: str = "Asia/Kolkata"
    DEBUG: bool = False

    # Daily reminder sweep (local time of the scheduler)
    SCHEDULER_ENABLED: bool = True
    REMINDER_HOUR: int = 9
    REMINDER_MINUTE: int = 0

    # Web Push (VAPID)
    VAPID_PUBLIC_KEY: str = ""
    VAPID_PRIVATE_KEY: str = ""
    VAPID_MAILTO: str = "mailto:admin@subzs.app"

    # Gemini (logo lookup / money-saving advice)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-3-flash-preview"
    GEMINI_TIMEOUT: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def get_sqlalchemy_url(self) -> str:
        """
        Convert DATABASE_URL to SQLAlchemy format (postgresql+psycopg://)
        """
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+psycopg://", 1)
        return url

    def today(self) -> date:
        """Calendar day in TIMEZONE; lifecycle and reminders are evaluated against it."""
        return datetime.now(ZoneInfo(self.TIMEZONE)).date()


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
