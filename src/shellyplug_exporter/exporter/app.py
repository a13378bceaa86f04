"""FastAPI application serving the Prometheus scrape endpoint."""

from __future__ import annotations

from fastapi import FastAPI, Response

from shellyplug_exporter import __version__
from shellyplug_exporter.metrics.registry import ShellyMetrics


def create_app(metrics: ShellyMetrics, metrics_path: str = "/") -> FastAPI:
    """Create the scrape application for the given metrics."""
    app = FastAPI(
        title="Shellyplug Exporter",
        description="Prometheus metrics for a Shelly Plus smart plug",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get(metrics_path, include_in_schema=False)
    async def scrape() -> Response:
        return Response(content=metrics.render(), media_type=metrics.content_type)

    return app
