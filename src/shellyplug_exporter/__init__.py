"""Shellyplug Exporter: Prometheus metrics for Shelly Plus smart plugs."""

try:
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("shellyplug-exporter")
except Exception:
    __version__ = "dev"
