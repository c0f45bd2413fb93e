"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # IANA identifier used when a profile has no stored timezone.
    # Leave empty to detect the host zone (TZ, then /etc/localtime).
    default_timezone: str = ""

    # Streak lengths (in days) that count as milestones.
    # Set as a JSON list, e.g. MILESTONE_DAYS='[7, 30, 90]'
    # Unset uses the built-in catalog (30 days through 3 years).
    milestone_days: list[int] | None = None

    @field_validator("default_timezone")
    @classmethod
    def strip_timezone(cls, value: str) -> str:
        return value.strip()

    @field_validator("milestone_days")
    @classmethod
    def normalize_milestone_days(cls, value: list[int] | None) -> list[int] | None:
        if value is None:
            return None
        if any(days <= 0 for days in value):
            raise ValueError("MILESTONE_DAYS must only contain positive day counts")
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_config(self) -> Self:
        if self.default_timezone:
            try:
                ZoneInfo(self.default_timezone)
            except (ZoneInfoNotFoundError, ValueError):
                raise ValueError(
                    f"DEFAULT_TIMEZONE '{self.default_timezone}' is not a known "
                    "IANA timezone. Leave it empty to use the host timezone."
                ) from None
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this in tests to reset settings between test cases.
    After clearing, the next get_settings() call will create
    a fresh Settings instance with current environment variables.

    Example:
        def test_something(monkeypatch):
            monkeypatch.setenv("DEFAULT_TIMEZONE", "America/Chicago")
            clear_settings_cache()
            settings = get_settings()  # Fresh instance
    """
    get_settings.cache_clear()
