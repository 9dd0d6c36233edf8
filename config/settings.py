"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    MIN_ANSWER_TOKENS: int = Field(default=5, ge=1)
    MAX_AUDIO_BYTES: int = Field(default=15 * 1024 * 1024, ge=1)
    SESSION_LOCK_TIMEOUT_S: float = Field(default=30.0, gt=0.0)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
