"""Server settings - dataclass defaults, optional YAML file, environment overrides."""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CONFIG_PATH_ENV = "TRADE_SERVER_CONFIG"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _get_env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _get_env_int(name: str, default: int) -> int:
    return int(os.getenv(name, default))


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Settings:
    """
    Validated server settings - single source of truth for defaults.

    YAML files and environment variables override these defaults.
    """
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def get_defaults(cls) -> Dict[str, Any]:
        return asdict(cls())

    def validate(self) -> None:
        """Validate settings values."""
        if not isinstance(self.host, str) or not self.host:
            raise ValueError(f"Host must be a non-empty string, got {self.host!r}")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 1 <= self.port <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level!r}")
        if not isinstance(self.cors_origins, list) or not all(
            isinstance(origin, str) for origin in self.cors_origins
        ):
            raise ValueError("CORS origins must be a list of strings")
        if not self.cors_origins:
            raise ValueError("At least one CORS origin must be specified")

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _load_from_yaml(config_path: str) -> Dict[str, Any]:
    """
    Load settings from a YAML file.

    Returns the 'server' section if present, otherwise the document root.
    """
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config file {config_path}: {e}")
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    section = config.get("server", config)
    if not isinstance(section, dict):
        raise ValueError(f"'server' section of {config_path} must be a mapping")
    if isinstance(section.get("cors_origins"), str):
        section["cors_origins"] = _split_origins(section["cors_origins"])
    return section


def _apply_environment_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Environment variables take precedence over file values and defaults."""
    if "HOST" in os.environ:
        config["host"] = _get_env("HOST", config["host"])

    if "PORT" in os.environ:
        try:
            config["port"] = _get_env_int("PORT", config["port"])
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {os.environ['PORT']!r}")

    if "LOG_LEVEL" in os.environ:
        config["log_level"] = _get_env("LOG_LEVEL", config["log_level"])

    if "CORS_ORIGINS" in os.environ:
        config["cors_origins"] = _split_origins(_get_env("CORS_ORIGINS", "*"))

    return config


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load server settings.

    Priority (highest to lowest):
    1. Environment variables
    2. YAML file values (explicit path, or the TRADE_SERVER_CONFIG variable)
    3. Settings dataclass defaults

    Raises:
        ValueError: If the file cannot be read or a value is invalid
    """
    config = Settings.get_defaults()

    config_path = config_path or os.getenv(CONFIG_PATH_ENV)
    if config_path:
        if not Path(config_path).exists():
            raise ValueError(f"Config file not found: {config_path}")
        file_config = _load_from_yaml(config_path)
        config.update({k: v for k, v in file_config.items() if v is not None})

    config = _apply_environment_overrides(config)

    try:
        settings = Settings(**config)
    except TypeError as e:
        raise ValueError(f"Invalid configuration field: {e}")
    settings.validate()
    return settings
