from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    SITE_NAME: str = "Restaurante La Escondida"
    API_PREFIX: str = "/api"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Reservations are kept in DATA_DIR / RESERVATIONS_FILE as a JSON array
    DATA_DIR: Path = Path("data")
    RESERVATIONS_FILE: str = "reservations.json"
    STATIC_DIR: Path | None = Path("public")

    # Admission policy
    OPEN_DAYS: str = "tue,wed,thu,fri,sat,sun"  # comma separated, mon..sun
    OPEN_TIME: str = "12:00"
    CLOSE_TIME: str = "22:00"
    TIMEZONE: str = "America/Santiago"
    DATETIME_FORMAT: str = "%d-%m-%Y, %H:%M:%S"

    # Notifications
    BUSINESS_EMAIL: str | None = None
    NOTIFY_TO: str | None = None
    BUSINESS_ADDRESS: str | None = None
    BUSINESS_MAPS_URL: str | None = None
    NOTIFY_DRAIN_SECONDS: float = 10.0

    # SMTP transport; leaving host, user or password empty disables email
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_SECURE: bool = False
    SMTP_USER: str | None = None
    SMTP_PASS: str | None = None
    SMTP_FROM: str | None = None
    SMTP_TIMEOUT: float = 30.0

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json | console

    model_config = ConfigDict(env_file=".env", extra="ignore")

    @property
    def open_days(self) -> frozenset[str]:
        return frozenset(day.strip().lower() for day in self.OPEN_DAYS.split(",") if day.strip())

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    @property
    def reservations_path(self) -> Path:
        return self.DATA_DIR / self.RESERVATIONS_FILE

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASS)

    @property
    def internal_recipient(self) -> str | None:
        return self.NOTIFY_TO or self.BUSINESS_EMAIL or self.SMTP_USER

    @property
    def sender(self) -> str:
        return self.SMTP_FROM or f"{self.SITE_NAME} <no-reply@localhost>"


settings = Settings()
