from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration.

    - Values loaded from the environment or `.env`
    - STATIC_PAYLOAD is a JSON object; pydantic-settings decodes it for us
    """

    # ----------------------------
    # Service
    # ----------------------------
    SERVICE_NAME: str = "dps-allocation-webhook"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ----------------------------
    # Allocation
    # ----------------------------
    PAYLOAD_POLICY: str = "example"  # example | none | static | echo
    STATIC_PAYLOAD: dict[str, Any] | None = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("PAYLOAD_POLICY", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
