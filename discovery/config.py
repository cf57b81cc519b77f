"""Configuration management for the event discovery engine."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    # Search history persistence
    history_db_path: str = Field(
        default="", description="SQLite file for search history (empty = in-memory)"
    )
    history_key: str = Field(
        default="searchHistory", description="Key the history log is stored under"
    )
    history_max_length: int = Field(
        default=3, description="Maximum number of remembered search terms"
    )

    # Bucket thresholds
    proximity_threshold: float = Field(
        default=10.0, description="Distance below which an event counts as close"
    )
    high_points_threshold: float = Field(
        default=50.0, description="Minimum price for the 'Many points' bucket"
    )
    few_places_threshold: int = Field(
        default=10, description="Maximum free places for the 'Few free places' bucket"
    )
    starting_soon_hours: int = Field(
        default=48, description="Window in hours for the 'Starting soon' bucket"
    )

    # CLI
    default_sort: str = Field(default="date", description="Default --sort for the browse CLI")

    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DISCOVERY_",
        extra="ignore",
    )

    @property
    def has_persistent_history(self) -> bool:
        """Check if search history is backed by a database file."""
        return bool(self.history_db_path)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure application logging."""
    if settings is None:
        settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
