"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

# Largest payload the audit table keeps for a single callback.
DEFAULT_NOTIFY_MESSAGE_MAX_BYTES = 65_535


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./pay_callbacks.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="Asia/Shanghai",
        description="IANA timezone (or UTC+HH:MM offset) used for stored timestamps",
    )
    notify_message_max_bytes: int = Field(
        default=DEFAULT_NOTIFY_MESSAGE_MAX_BYTES,
        description="Payloads longer than this are truncated before being audited",
        gt=0,
        le=DEFAULT_NOTIFY_MESSAGE_MAX_BYTES,
    )
    wechat_pay_cert_dir: str = Field(
        default="var/cert/wechat_pay",
        description="Directory holding '<mch_id>_platform_cert.pem' files",
    )
    wechat_api_base_url: str = Field(
        default="https://api.weixin.qq.com",
        description="Base URL of the mini-program server API",
    )
    wechat_api_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout applied to outbound mini-program API requests",
        gt=0,
    )
    admin_api_token: str | None = Field(
        default=None,
        description="Token required in the X-Admin-Token header for admin endpoints",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized

    @field_validator("wechat_api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = [
    "DEFAULT_NOTIFY_MESSAGE_MAX_BYTES",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
