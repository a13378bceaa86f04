"""Configuration management for the exporter."""

from shellyplug_exporter.config.schema import AppConfig
from shellyplug_exporter.config.manager import ConfigManager

__all__ = ["AppConfig", "ConfigManager"]
