"""
Configuration settings for the Sproutling review scheduler.

Uses Pydantic Settings for environment variable management with .env file support.
Scheduling constants (ease bounds, interval cap, review ratio) are fixed rules
in the scheduler and are not configurable.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PATH = Path.home() / ".sproutling" / "mastery.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{DEFAULT_DB_PATH}",
        description="SQLAlchemy connection string for mastery records",
    )

    # ========================================
    # Curriculum
    # ========================================
    curriculum_dir: Path | None = Field(
        default=None,
        description="Directory with {subject}.json curriculum files (None for bundled data)",
    )

    # ========================================
    # Profiles
    # ========================================
    default_profile_id: str = Field(
        default="default",
        description="Learner profile used by the CLI when none is given",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
