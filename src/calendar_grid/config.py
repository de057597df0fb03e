"""Configuration management for Calendar Grid."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.layout import LayoutConfig
from .utils.exceptions import ConfigurationError

load_dotenv()


class AppConfig(BaseSettings):
    """Application configuration."""

    # Grid
    hour_height: float = Field(default=60, validation_alias="GRID_HOUR_HEIGHT")
    min_event_minutes: int = Field(default=15, validation_alias="GRID_MIN_EVENT_MINUTES")
    timezone: str = Field(default="UTC", validation_alias="GRID_TIMEZONE")

    # Editing
    snap_interval: int = Field(default=15, validation_alias="GRID_SNAP_INTERVAL")

    # Recurrence preview
    occurrence_limit: int = Field(default=10, validation_alias="GRID_OCCURRENCE_LIMIT")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="LOG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )

    def layout_config(self) -> LayoutConfig:
        """
        Build the grid configuration for the positioner.

        Raises:
            ConfigurationError: If the grid settings are invalid
        """
        try:
            return LayoutConfig(
                hour_height=self.hour_height,
                min_event_minutes=self.min_event_minutes,
                timezone=self.timezone,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid grid configuration: {e}") from e


# Global config instance
config = AppConfig()
