"""Wire models for Shelly.GetStatus and the DeviceStatus snapshot."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictStr

# Strict fields so "12.5" or 1 never pass as a float/bool; JSON ints still count as floats.
_WIRE_CONFIG = ConfigDict(allow_inf_nan=False)


class ActiveEnergy(BaseModel):
    model_config = _WIRE_CONFIG

    total: StrictFloat


class SwitchTemperature(BaseModel):
    model_config = _WIRE_CONFIG

    t_c: StrictFloat = Field(alias="tC")


class SwitchStatus(BaseModel):
    """``switch:0`` component of the status response."""

    model_config = _WIRE_CONFIG

    output: StrictBool
    apower: StrictFloat
    voltage: StrictFloat
    current: StrictFloat
    aenergy: ActiveEnergy
    temperature: SwitchTemperature


class FirmwareRelease(BaseModel):
    model_config = _WIRE_CONFIG

    version: StrictStr


class AvailableUpdates(BaseModel):
    model_config = _WIRE_CONFIG

    stable: FirmwareRelease | None = None


class SysStatus(BaseModel):
    model_config = _WIRE_CONFIG

    mac: StrictStr
    available_updates: AvailableUpdates


class ShellyStatusResponse(BaseModel):
    """Subset of the Shelly.GetStatus response the exporter consumes."""

    model_config = _WIRE_CONFIG

    switch0: SwitchStatus = Field(alias="switch:0")
    sys: SysStatus


@dataclass(frozen=True)
class DeviceStatus:
    """Snapshot of one successful poll."""

    mac: str
    output: bool
    apower: float  # W
    voltage: float  # V
    current: float  # A
    aenergy_total: float  # Wh, resets on device reboot
    temperature_c: float
    available_update: str | None  # Pending stable firmware version, if any

    @classmethod
    def from_response(cls, response: ShellyStatusResponse) -> DeviceStatus:
        switch = response.switch0
        stable = response.sys.available_updates.stable
        return cls(
            mac=response.sys.mac,
            output=switch.output,
            apower=float(switch.apower),
            voltage=float(switch.voltage),
            current=float(switch.current),
            aenergy_total=float(switch.aenergy.total),
            temperature_c=float(switch.temperature.t_c),
            available_update=stable.version if stable is not None else None,
        )

    @property
    def update_available(self) -> bool:
        return self.available_update is not None
