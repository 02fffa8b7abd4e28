"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
Parameters are loaded from YAML and validated using Pydantic models. Every section
carries defaults, so an empty file (or no file at all) yields a working setup.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fitness_rpg_ledger.utils.exceptions import ConfigurationError


class ProgressionConfig(BaseModel):
    """Experience and leveling constants."""

    xp_per_set: int = Field(10, ge=0)
    xp_per_volume_unit: int = Field(5, ge=0)
    volume_unit: float = Field(1000.0, gt=0)
    xp_per_level_multiplier: int = Field(100, gt=0)
    xp_per_sleep_log: int = Field(5, ge=0)
    xp_per_meal_logged: int = Field(3, ge=0)
    xp_per_supplement: int = Field(2, ge=0)


class SetIDConfig(BaseModel):
    """Workout set ID generation configuration."""

    algorithm: str = "sha256"
    length: int = Field(16, ge=8, le=64)


class ProcessingConfig(BaseModel):
    """Data processing configuration."""

    timezone: str = "UTC"
    set_id: SetIDConfig = Field(default_factory=SetIDConfig)


class CSVConfig(BaseModel):
    """CSV reading configuration."""

    encodings: list[str] = Field(default_factory=lambda: ["utf-8-sig", "utf-8", "latin-1"])
    delimiters: list[str] = Field(default_factory=lambda: [",", ";", "\t"])


class StorageConfig(BaseModel):
    """Local snapshot storage configuration."""

    state_file: str = "data/state.json"


class RemoteTablesConfig(BaseModel):
    """Remote table names."""

    workouts: str = "workouts"
    sleep: str = "sleep"
    meals: str = "meals"
    supplements: str = "supplements"


class RemoteConfig(BaseModel):
    """Remote mirror configuration."""

    enabled: bool = False
    base_url: str = ""
    api_key: str = ""
    timeout_seconds: float = Field(30.0, gt=0)
    page_size: int = Field(1000, gt=0)
    background_writes: bool = True
    tables: RemoteTablesConfig = Field(default_factory=RemoteTablesConfig)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    progression: ProgressionConfig = Field(default_factory=ProgressionConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    csv: CSVConfig = Field(default_factory=CSVConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="FRL_", env_nested_delimiter="__", case_sensitive=False
    )


class ParameterLoader:
    """
    Centralized parameter loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration parameters.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize parameter loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            self.config = AppConfig(**config_dict)

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_progression_config(self) -> ProgressionConfig:
        """Get experience and leveling configuration."""
        return self.config.progression

    def get_processing_config(self) -> ProcessingConfig:
        """Get data processing configuration."""
        return self.config.processing

    def get_csv_config(self) -> CSVConfig:
        """Get CSV reading configuration."""
        return self.config.csv

    def get_storage_config(self) -> StorageConfig:
        """Get local storage configuration."""
        return self.config.storage

    def get_remote_config(self) -> RemoteConfig:
        """Get remote mirror configuration."""
        return self.config.remote

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging

    def get_raw_config(self) -> dict[str, Any]:
        """
        Get raw configuration dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return self.config.model_dump()
