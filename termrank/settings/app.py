"""Application settings powered by Pydantic BaseSettings."""

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    db_path: Path = Field(
        default=Path("data/content.sqlite"), validation_alias="TERMRANK_DB_PATH"
    )
    ranking_config_path: Path | None = Field(
        default=None, validation_alias="TERMRANK_RANKING_CONFIG"
    )
    log_level: str = Field(default="INFO", validation_alias="TERMRANK_LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="TERMRANK_LOG_JSON")

    def log_level_number(self) -> int:
        """Return the numeric stdlib logging level for log_level."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
