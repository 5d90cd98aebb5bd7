# backend/seatbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import DEFAULT_BLACKOUT_HORIZON_DAYS, DEFAULT_NUMBER_OF_SEATS, DEFAULT_TIMEZONE


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Process configuration for the seat reservation engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "test", "production"] = "development"
    is_testing: bool = Field(default_factory=is_running_tests)
    log_level: str = "INFO"

    # Store
    database_url: str = "sqlite:///./seatbook.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 10

    # Calendar
    timezone: str = DEFAULT_TIMEZONE
    number_of_seats: int = Field(default=DEFAULT_NUMBER_OF_SEATS, ge=1)
    blackout_horizon_days: int = Field(default=DEFAULT_BLACKOUT_HORIZON_DAYS, ge=0)
    scheduler_enabled: bool = True

    # Locking: redis_url empty keeps locks process-local
    redis_url: str = ""
    lock_namespace: str = "seatbook"
    lock_ttl_seconds: int = Field(default=30, ge=1)
    lock_wait_seconds: float = Field(default=5.0, ge=0)

    # Celery
    celery_broker_url: str = ""

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @property
    def local_timezone(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)

    def get_broker_url(self) -> str:
        """Broker priority: CELERY_BROKER_URL -> REDIS_URL -> local default."""
        return self.celery_broker_url or self.redis_url or "redis://localhost:6379/0"


settings = Settings()
