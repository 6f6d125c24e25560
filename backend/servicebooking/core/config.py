# backend/servicebooking/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Engine settings resolved from the environment."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    environment: str = Field(default="development", description="Deployment environment name")
    log_level: str = Field(default="INFO", description="Root log level")

    database_url: str = Field(
        default="sqlite+pysqlite:///./servicebooking.db",
        description="SQLAlchemy URL for schedule and booking storage",
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for distributed booking locks and real-time push",
    )

    booking_lock_ttl_seconds: int = Field(default=30, description="Lock expiry for booking mutexes")
    booking_lock_wait_seconds: float = Field(
        default=10.0, description="How long a request waits for a contended booking lock"
    )
    booking_notes_max_length: int = Field(default=1000, description="Maximum booking notes length")
    notifications_enabled: bool = Field(default=True, description="Dispatch booking notifications")

    @field_validator("booking_lock_ttl_seconds")
    @classmethod
    def _validate_lock_ttl(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"BOOKING_LOCK_TTL_SECONDS must be > 0, got {value}")
        return value

    @field_validator("booking_lock_wait_seconds")
    @classmethod
    def _validate_lock_wait(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"BOOKING_LOCK_WAIT_SECONDS must be > 0, got {value}")
        return value

    @field_validator("booking_notes_max_length")
    @classmethod
    def _validate_notes_length(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"BOOKING_NOTES_MAX_LENGTH must be >= 1, got {value}")
        return value

    @field_validator("redis_url")
    @classmethod
    def _blank_redis_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


def configure_logging(config: Optional[Settings] = None) -> None:
    """Apply the configured log level and format to the root logger."""
    config = config or settings
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Logging configured for environment '%s'", config.environment)


settings = Settings()
