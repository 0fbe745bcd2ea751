"""Application configuration settings."""
from __future__ import annotations

import os
import re
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "staging" | "prod"
ENV = os.getenv("EVENTLOG_ENV", "dev").lower()

_UUID_PREFIX_RE = re.compile(r"^[0-9a-z]{5}$")


class Settings(BaseSettings):
    """Environment configuration for the event log backend."""

    app_env: str = Field(default=ENV, validation_alias=AliasChoices("EVENTLOG_ENV", "APP_ENV"))
    database_url: str = "sqlite:///eventlog.db"
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Resource identity -----------------------------------------------
    UUID_PREFIX: str = "zzzzz"
    KIND_NAMESPACE: str = "arvados"

    # Columns left out of the attribute snapshots stored in log properties.
    UNLOGGED_ATTRIBUTES: list[str] = Field(default_factory=list)

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("UUID_PREFIX")
    @classmethod
    def _validate_uuid_prefix(cls, value: str) -> str:
        value = value.strip().lower()
        if not _UUID_PREFIX_RE.match(value):
            raise ValueError("UUID_PREFIX must be exactly 5 characters of [0-9a-z]")
        return value

    @field_validator("UNLOGGED_ATTRIBUTES", mode="before")
    @classmethod
    def _split_unlogged(cls, value):
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    @property
    def system_user_uuid(self) -> str:
        return f"{self.UUID_PREFIX}-tpzed-000000000000000"


class AppInfo(BaseModel):
    name: str = "eventlog-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = ["ENV", "Settings", "AppInfo", "settings", "get_settings"]
