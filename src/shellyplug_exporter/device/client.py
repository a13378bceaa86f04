"""Shelly Gen2 local RPC client for status polling."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from shellyplug_exporter.device.models import DeviceStatus, ShellyStatusResponse
from shellyplug_exporter.exceptions import DecodeError, FetchError

logger = logging.getLogger(__name__)

# Shelly Gen2 RPC endpoint
_GET_STATUS = "/rpc/Shelly.GetStatus"


def build_status_url(base_url: str) -> str:
    """Return the full Shelly.GetStatus URL for a device base URL."""
    base = base_url.strip().rstrip("/")
    if not base.startswith(("http://", "https://")):
        base = f"http://{base}"
    return f"{base}{_GET_STATUS}"


def parse_status(payload: Any) -> DeviceStatus:
    """Decode a Shelly.GetStatus JSON payload into a DeviceStatus."""
    try:
        response = ShellyStatusResponse.model_validate(payload)
    except ValidationError as err:
        raise DecodeError(f"Unexpected status payload: {err}") from err
    return DeviceStatus.from_response(response)


class ShellyClient:
    """Fetches Shelly.GetStatus from one plug.

    One GET per call, no retries. Uses httpx defaults for timeouts and pooling.
    """

    def __init__(self, url: str, client: httpx.AsyncClient | None = None) -> None:
        self._url = url
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return self._url

    async def fetch(self) -> DeviceStatus:
        """Fetch and decode the current device status.

        Raises:
            FetchError: malformed URL, transport failure, non-2xx status or
                non-JSON body.
            DecodeError: JSON body missing required fields or with wrong types.
        """
        try:
            resp = await self._client.get(self._url)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL) as err:
            raise FetchError(f"Request to {self._url} failed: {err}") from err
        except ValueError as err:
            raise FetchError(f"Response from {self._url} is not valid JSON: {err}") from err

        logger.debug("Status payload: %s", payload)
        return parse_status(payload)

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ShellyClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
