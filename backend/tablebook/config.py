# backend/tablebook/config.py

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/sqlite/reservations.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 2.0

    venue_timezone: str = "Europe/Madrid"

    # Used until staff save venue settings
    default_slot_capacity: int = 10
    default_slot_interval: int = 30

    sqlite_busy_timeout: float = 30.0
    notifications_enabled: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()


def venue_now() -> datetime:
    """Current wall-clock time at the venue, as a naive datetime."""
    return datetime.now(ZoneInfo(settings.venue_timezone)).replace(tzinfo=None)
