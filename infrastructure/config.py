"""Application settings"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the scheduler API.

    Values are read, in order of precedence, from init arguments, environment
    variables prefixed with ``SCHEDULER_`` and the ``.env`` file.

    To access these settings, the `get_settings` dependency should be used.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_TITLE: str = "Room Reservation Scheduler API"
    APP_VERSION: str = "1.0.0"

    # Auth
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
