"""
Chart engine settings and configuration management
Uses Pydantic Settings for environment variable handling and validation
"""

from functools import lru_cache

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Default chart settings with environment variable support"""

    # Records
    date_column: str = Field(
        default="created_at",
        description="Record field holding the timestamp used for calendar bucketing"
    )
    preaggregated_field: str = Field(
        default="aggregate",
        description="Record field read when the data is already aggregated per bucket"
    )

    # Locale and time zone
    language: str = Field(default="en", description="Locale used for fancy labels")
    timezone: str = Field(default="UTC", description="Time zone that defines 'now' and local dates")

    # Fancy label formats (pendulum format tokens)
    date_format: str = Field(default="dddd Do MMM, YYYY")
    month_format: str = Field(default="MMMM, YYYY")
    hour_format: str = Field(default="ddd, MMM D, YYYY h A")
    year_format: str = Field(default="YYYY")

    # Default spans for "most recent N" charts
    default_years: int = Field(default=4, ge=0)
    default_days: int = Field(default=7, ge=0)
    default_months: int = Field(default=6, ge=0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="DBCHARTS_",
        case_sensitive=False,
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject time zone names pytz does not know"""
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached chart settings
    Uses lru_cache to avoid reading environment variables multiple times
    """
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache. Used primarily for testing.
    After calling this, the next call to get_settings() will
    create a new Settings instance with fresh environment variables.
    """
    get_settings.cache_clear()
