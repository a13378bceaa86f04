"""Configuration loading: optional YAML file overlaid with environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from shellyplug_exporter.config.schema import AppConfig
from shellyplug_exporter.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "SHELLYPLUG_CONFIG"
DEFAULT_CONFIG_PATH = Path("config.yaml")

# Environment variable → (section, key) in the config tree
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SHELLYPLUG_URL": ("device", "url"),
    "PERIOD": ("device", "period_seconds"),
    "HOST": ("exporter", "host"),
    "PORT": ("exporter", "port"),
    "METRICS_PATH": ("exporter", "metrics_path"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "LOG_FILE": ("logging", "file"),
}


class ConfigManager:
    """Builds an AppConfig from a YAML file plus environment overrides."""

    def __init__(
        self,
        path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        explicit = path or self._environ.get(CONFIG_PATH_ENV)
        self._path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH
        self._path_required = bool(explicit)
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded. Call load() first.")
        return self._config

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppConfig:
        """Load, merge and validate. Raises ConfigurationError on any problem."""
        raw = self._load_yaml()
        merged = self._deep_merge(raw, self._env_overrides())

        device = merged.get("device")
        if not isinstance(device, dict) or not device.get("url"):
            raise ConfigurationError("SHELLYPLUG_URL not set")

        try:
            self._config = AppConfig.model_validate(merged)
        except ValidationError as err:
            raise ConfigurationError(f"Invalid configuration: {err}") from err
        logger.debug("Configuration loaded (file: %s)", self._path if self._path.exists() else "none")
        return self._config

    def _load_yaml(self) -> dict[str, Any]:
        if not self._path.exists():
            if self._path_required:
                raise ConfigurationError(f"Config file not found: {self._path}")
            return {}
        try:
            with open(self._path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as err:
            raise ConfigurationError(f"Cannot read config file {self._path}: {err}") from err
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self._path} must contain a mapping")
        return data

    def _env_overrides(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for var, (section, key) in ENV_OVERRIDES.items():
            value = self._environ.get(var)
            if value is None or value == "":
                continue
            overrides.setdefault(section, {})[key] = value
        return overrides

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, returning a new dict."""
        result = dict(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
