"""Unit tests for configuration loading."""

import logging
from pathlib import Path

import pytest

from fitness_rpg_ledger.utils.exceptions import ConfigurationError
from fitness_rpg_ledger.utils.hashing import generate_set_id, set_identity_string
from fitness_rpg_ledger.utils.logging_config import setup_logging
from fitness_rpg_ledger.utils.parameters import (
    AppConfig,
    LoggingConfig,
    ParameterLoader,
    SetIDConfig,
)

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


def test_repository_config_loads() -> None:
    """Test that the shipped configuration file is valid."""
    loader = ParameterLoader(str(REPO_CONFIG))

    progression = loader.get_progression_config()
    if progression.xp_per_set != 10 or progression.xp_per_level_multiplier != 100:
        raise AssertionError(f"Unexpected progression config {progression}")
    if loader.get_remote_config().page_size != 1000:
        raise AssertionError("Expected remote page size 1000")
    if loader.get_processing_config().timezone != "UTC":
        raise AssertionError("Expected UTC timezone")
    if "storage" not in loader.get_raw_config():
        raise AssertionError("Expected storage section in raw config")


def test_partial_config_uses_defaults(tmp_path: Path) -> None:
    """Test that missing sections fall back to defaults."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("progression:\n  xp_per_set: 20\n", encoding="utf-8")

    loader = ParameterLoader(str(config_file))

    if loader.get_progression_config().xp_per_set != 20:
        raise AssertionError("Expected overridden xp_per_set")
    if loader.get_progression_config().xp_per_sleep_log != 5:
        raise AssertionError("Expected default xp_per_sleep_log")
    if loader.get_storage_config().state_file != "data/state.json":
        raise AssertionError("Expected default state file")


def test_empty_config_file(tmp_path: Path) -> None:
    """Test that an empty file is a valid configuration."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("", encoding="utf-8")

    loader = ParameterLoader(str(config_file))

    if loader.get_csv_config().delimiters != [",", ";", "\t"]:
        raise AssertionError("Expected default delimiters")


def test_missing_config_file(tmp_path: Path) -> None:
    """Test that a missing file raises ConfigurationError."""
    with pytest.raises(ConfigurationError):
        ParameterLoader(str(tmp_path / "nope.yaml"))


def test_invalid_values_raise(tmp_path: Path) -> None:
    """Test that invalid values raise ConfigurationError."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("progression:\n  xp_per_level_multiplier: 0\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ParameterLoader(str(config_file))


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    """Test that malformed YAML raises ConfigurationError."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("progression: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ParameterLoader(str(config_file))


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that FRL_ environment variables configure nested settings."""
    monkeypatch.setenv("FRL_REMOTE__API_KEY", "secret")
    monkeypatch.setenv("FRL_PROCESSING__TIMEZONE", "Europe/Madrid")

    config = AppConfig()

    if config.remote.api_key != "secret":
        raise AssertionError(f"Expected api key from env, got {config.remote.api_key!r}")
    if config.processing.timezone != "Europe/Madrid":
        raise AssertionError(f"Expected timezone from env, got {config.processing.timezone}")


def test_set_id_generation() -> None:
    """Test the identity string and ID length."""
    identity = set_identity_string("2024-01-01", "Squat", 100, 5)
    if identity != "2024-01-01|Squat|100.000|5":
        raise AssertionError(f"Unexpected identity string {identity}")

    set_id = generate_set_id("2024-01-01", "Squat", 100, 5, SetIDConfig(algorithm="md5", length=12))
    if len(set_id) != 12:
        raise AssertionError(f"Expected 12 characters, got {len(set_id)}")


def test_setup_logging(tmp_path: Path) -> None:
    """Test console and file handler setup."""
    log_file = tmp_path / "logs" / "app.log"
    config = LoggingConfig(level="DEBUG", file=str(log_file), console=True)

    logger = setup_logging(config, "fitness_rpg_ledger.test")
    logger.debug("hello")
    for handler in logger.handlers:
        handler.flush()

    if logger.level != logging.DEBUG:
        raise AssertionError(f"Expected DEBUG level, got {logger.level}")
    if len(logger.handlers) != 2:
        raise AssertionError(f"Expected 2 handlers, got {len(logger.handlers)}")
    if "hello" not in log_file.read_text(encoding="utf-8"):
        raise AssertionError("Expected the message in the log file")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
