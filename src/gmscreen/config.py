"""Configuration management for gmscreen using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="GMSCREEN_",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Echo SQL statements")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/gmscreen.db",
        description="Database connection URL",
    )

    # Dice
    roll_history_size: int = Field(
        default=10, ge=1, description="Number of recent rolls kept in a roll history"
    )

    # Backup
    backup_version: str = Field(default="1.0.0", description="Version stamped on backups")

    # Rules data
    class_key_abilities_file: Path | None = Field(
        default=None,
        description="YAML file mapping class names to their key ability (overrides packaged table)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
