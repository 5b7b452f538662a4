"""
Settings loaded from environment variables.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .notify.mailer import SMTPOptions


class Settings(BaseSettings):
    """Runtime configuration for a sweep."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Platform API
    cf_api_url: str = Field(description="Platform API base URL")
    cf_token: str = Field(repr=False, description="Pre-issued bearer token")
    cf_timeout: int = Field(default=30, gt=0, description="Per-request timeout in seconds")

    # Mail
    smtp_host: str
    smtp_port: int = 587
    smtp_user: str
    smtp_pass: str = Field(repr=False)
    smtp_cert: Optional[str] = Field(default=None, repr=False)
    smtp_from: str

    # Policy
    org_prefix: str = "sandbox-"
    notify_days: int = Field(default=25, ge=0)
    purge_days: int = Field(default=30, ge=0)
    time_starts_at: datetime = datetime(1970, 1, 1, tzinfo=timezone.utc)
    recreate_spaces: bool = True

    @field_validator("time_starts_at")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("time_starts_at must include a timezone offset")
        return value

    @field_validator("smtp_cert")
    @classmethod
    def _blank_cert_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.notify_days > self.purge_days:
            raise ValueError(
                f"notify_days ({self.notify_days}) must not exceed purge_days ({self.purge_days})"
            )
        return self

    @property
    def smtp_options(self) -> SMTPOptions:
        return SMTPOptions(
            host=self.smtp_host,
            port=self.smtp_port,
            user=self.smtp_user,
            password=self.smtp_pass,
            cert=self.smtp_cert,
        )


def load_settings(**overrides) -> Settings:
    """
    Load settings from the environment.

    Args:
        **overrides: Values that take precedence over the environment

    Raises:
        ConfigError: If a required value is missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
