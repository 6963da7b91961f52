"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone (or UTC offset) used to store timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )

    vapid_public_key: str | None = Field(
        default=None,
        description="VAPID public key handed to browsers when they subscribe to push",
    )
    vapid_private_key: str | None = Field(
        default=None,
        description="VAPID private key used to sign push requests",
    )
    vapid_subject: str = Field(
        default="mailto:admin@petflix.com",
        description="Contact URI sent in the VAPID claims",
    )

    notification_processor_enabled: bool = Field(
        default=True,
        description="Start the notification grouping processor with the application",
    )
    notification_grouping_window_seconds: int = Field(
        default=5 * 60,
        description="Minimum age of a queued notification before it can be sent",
        ge=0,
    )
    notification_processing_interval_seconds: float = Field(
        default=60,
        description="Seconds between two notification processing ticks",
        gt=0,
    )
    notification_dispatch_timeout_seconds: float = Field(
        default=10,
        description="Upper bound for one push delivery attempt",
        gt=0,
    )
    notification_dispatch_workers: int = Field(
        default=4,
        description="Threads used to deliver pushes to a user's subscriptions",
        gt=0,
    )
    notification_retention_days: int = Field(
        default=7,
        description="Days a sent queue row is kept before being purged",
        gt=0,
    )
    notification_retention_interval_seconds: float = Field(
        default=60 * 60,
        description="Seconds between two retention purges",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_vapid_pair(self) -> "Settings":
        if bool(self.vapid_public_key) ^ bool(self.vapid_private_key):
            raise ValueError(
                "VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY must both be provided to enable push"
            )
        if not self.vapid_subject.startswith(("mailto:", "https://")):
            raise ValueError("VAPID_SUBJECT must be a mailto: or https:// URI")
        return self

    @property
    def push_enabled(self) -> bool:
        """Return ``True`` when VAPID credentials are configured."""

        return bool(self.vapid_public_key and self.vapid_private_key)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
