"""Data models for simulated devices and tick results."""

from .devices import (
    CRITICAL_BATTERY_LEVEL,
    PHASE_ALL,
    PHASES,
    Car,
    Device,
    DeviceKind,
    SmartMeter,
    SolarInverter,
    Stove,
    Wallbox,
    device_from_dict,
    new_device_id,
    validate_phase,
)
from .links import ChargingLinks
from .snapshot import HouseholdSnapshot, PhasePower, TickResult

__all__ = [
    "CRITICAL_BATTERY_LEVEL",
    "PHASE_ALL",
    "PHASES",
    "Car",
    "ChargingLinks",
    "Device",
    "DeviceKind",
    "HouseholdSnapshot",
    "PhasePower",
    "SmartMeter",
    "SolarInverter",
    "Stove",
    "TickResult",
    "Wallbox",
    "device_from_dict",
    "new_device_id",
    "validate_phase",
]
