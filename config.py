"""
Configuration settings for the adventure workshop runner.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ADVENTURE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".config",
        description="Base directory for per-workshop progress stores",
    )
    global_store_name: str = Field(
        default="adventure",
        description="Directory name of the store shared by all workshops",
    )

    # ========================================
    # Localization
    # ========================================
    default_lang: str = Field(
        default="en",
        description="Language used when a workshop does not declare one",
    )

    # ========================================
    # Exercises
    # ========================================
    exercise_dir_name: str = Field(
        default="exercises",
        description="Exercise directory name, relative to the workshop app dir",
    )

    # ========================================
    # Terminal UI
    # ========================================
    menu_width: int = Field(
        default=65,
        description="Width of the exercise menu in columns",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum loguru level written to stderr",
    )

    def app_store_path(self, name: str) -> Path:
        """Path of the progress database for one workshop."""
        return self.data_dir / name / "state.db"

    def global_store_path(self) -> Path:
        """Path of the database shared by every workshop."""
        return self.data_dir / self.global_store_name / "state.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
