"""Exception hierarchy for the exporter."""

from __future__ import annotations


class ShellyplugExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigurationError(ShellyplugExporterError):
    """Invalid or missing configuration, or the scrape port could not be bound.

    Always fatal: raised during startup, before polling begins.
    """


class PollCycleError(ShellyplugExporterError):
    """A single poll cycle failed. The loop logs it and tries again next tick."""


class FetchError(PollCycleError):
    """Transport failure, non-2xx response, or a body that is not JSON."""


class DecodeError(PollCycleError):
    """The body is JSON but required fields are missing or mistyped."""
