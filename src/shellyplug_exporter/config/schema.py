"""Pydantic configuration models for all exporter settings."""

from __future__ import annotations

import httpx
from pydantic import BaseModel, Field, field_validator

from shellyplug_exporter.device.client import build_status_url


class DeviceConfig(BaseModel):
    url: str = Field(min_length=1)  # Base URL of the plug, e.g. http://192.168.1.50
    period_seconds: int = Field(60, ge=1)

    @field_validator("url")
    @classmethod
    def _url_is_valid(cls, value: str) -> str:
        try:
            url = httpx.URL(build_status_url(value))
        except httpx.InvalidURL as err:
            raise ValueError(f"url is not a valid URL: {err}") from err
        if not url.host:
            raise ValueError("url has no host")
        return value


class ExporterConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(9185, ge=1, le=65535)
    metrics_path: str = "/"

    @field_validator("metrics_path")
    @classmethod
    def _path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("metrics_path must start with '/'")
        return value


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file: str = ""

    @field_validator("format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError("format must be 'json' or 'console'")
        return value


class AppConfig(BaseModel):
    """Root configuration model."""

    device: DeviceConfig
    exporter: ExporterConfig = ExporterConfig()
    logging: LoggingConfig = LoggingConfig()
