# backend/menu_booking/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_BACKEND_ROOT = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")

    # Database
    database_url: str = Field(
        default=f"sqlite:///{_BACKEND_ROOT / 'menu_booking.db'}",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    sqlite_busy_timeout_seconds: float = Field(
        default=15.0, description="How long SQLite waits on a locked database file"
    )

    # Booking mutual exclusion
    booking_lock_backend: Literal["local", "redis"] = Field(
        default="local",
        alias="BOOKING_LOCK_BACKEND",
        description="Where the per-(item, date) booking lock lives",
    )
    booking_lock_timeout_seconds: float = Field(
        default=5.0,
        alias="BOOKING_LOCK_TIMEOUT_SECONDS",
        description="Max seconds a booking request waits for its slot lock",
    )
    booking_lock_ttl_seconds: int = Field(
        default=30,
        alias="BOOKING_LOCK_TTL_SECONDS",
        description="Expiry for redis-held booking locks (crash safety)",
    )
    booking_retry_after_seconds: int = Field(
        default=2, description="Retry-After hint returned with retryable booking failures"
    )
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    lock_namespace: str = Field(default="menu_booking", description="Prefix for redis lock keys")

    # Listing
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    slow_operation_threshold_seconds: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = (value or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_database_url(self, override: Optional[str] = None) -> str:
        """Return the database URL, preferring an explicit override."""
        return override or self.database_url


settings = Settings()
