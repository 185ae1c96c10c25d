"""Data models for simulated household devices.

Every device class is a dataclass carrying its settings (configured once),
its externally visible state (updated every tick) and the typed bookkeeping
the simulation needs between ticks. ``DeviceKind`` tags the variant.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union

PHASES = ("A", "B", "C")
PHASE_ALL = "All"
CRITICAL_BATTERY_LEVEL = 10


def validate_phase(phase: str) -> str:
    """Return ``phase`` if it names a phase or ``All``, raise ValueError otherwise."""
    if phase not in PHASES and phase != PHASE_ALL:
        raise ValueError(f"phase must be one of A, B, C or All, got {phase!r}")
    return phase


def new_device_id() -> str:
    """Generate a fresh device identity."""
    return str(uuid.uuid4())


class DeviceKind(str, Enum):
    """Device classes known to the simulation."""

    SOLAR_INVERTER = "solar_inverter"
    STOVE = "stove"
    CAR = "car"
    WALLBOX = "wallbox"
    SMART_METER = "smart_meter"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    DeviceKind.SOLAR_INVERTER: "Solar inverter",
    DeviceKind.STOVE: "Stove",
    DeviceKind.CAR: "Electric car",
    DeviceKind.WALLBOX: "Wallbox",
    DeviceKind.SMART_METER: "Smart meter",
}


@dataclass
class SolarInverter:
    """Solar inverter. Production is reported as negative power."""

    kind: ClassVar[DeviceKind] = DeviceKind.SOLAR_INVERTER

    device_id: str
    name: str = "Solar inverter"
    max_capacity_w: float = 5000.0
    phase: str = PHASE_ALL
    current_power_w: float = 0.0

    def __post_init__(self) -> None:
        if self.max_capacity_w <= 0:
            raise ValueError("max_capacity_w must be positive")
        validate_phase(self.phase)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "device_id": self.device_id,
            "name": self.name,
            "max_capacity_w": self.max_capacity_w,
            "phase": self.phase,
            "current_power_w": round(self.current_power_w, 2),
        }


@dataclass
class Stove:
    """Electric stove with a 12-tick duty cycle while powered."""

    kind: ClassVar[DeviceKind] = DeviceKind.STOVE
    consumer: ClassVar[bool] = True

    device_id: str
    name: str = "Stove"
    max_power_consumption_w: float = 2000.0
    phase: str = "A"
    powered: bool = False
    current_power_w: float = 0.0
    total_energy_consumed_kwh: float = 0.0
    cycle: int = 0

    def __post_init__(self) -> None:
        if self.max_power_consumption_w <= 0:
            raise ValueError("max_power_consumption_w must be positive")
        validate_phase(self.phase)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "device_id": self.device_id,
            "name": self.name,
            "max_power_consumption_w": self.max_power_consumption_w,
            "phase": self.phase,
            "powered": self.powered,
            "current_power_w": round(self.current_power_w, 2),
            "total_energy_consumed_kwh": round(self.total_energy_consumed_kwh, 6),
            "cycle": self.cycle,
        }


@dataclass
class Car:
    """Electric vehicle with a battery measured in whole percent."""

    kind: ClassVar[DeviceKind] = DeviceKind.CAR

    device_id: str
    name: str = "Electric car"
    capacity_wh: float = 50000.0
    plugged_in: bool = False
    battery_level: int = 50
    battery_critical: bool = False
    min_charging_current: int = 6
    last_charge_update: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.capacity_wh <= 0:
            raise ValueError("capacity_wh must be positive")
        if not 0 <= self.battery_level <= 100:
            raise ValueError("battery_level must be in the range [0, 100]")
        if self.min_charging_current < 0:
            raise ValueError("min_charging_current must not be negative")
        self.battery_critical = self.battery_level < CRITICAL_BATTERY_LEVEL

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "device_id": self.device_id,
            "name": self.name,
            "capacity_wh": self.capacity_wh,
            "plugged_in": self.plugged_in,
            "battery_level": self.battery_level,
            "battery_critical": self.battery_critical,
            "min_charging_current": self.min_charging_current,
            "last_charge_update": (
                self.last_charge_update.isoformat() if self.last_charge_update else None
            ),
        }


@dataclass
class Wallbox:
    """EV charger. Charges at 230 V times the configured maximum current."""

    kind: ClassVar[DeviceKind] = DeviceKind.WALLBOX

    device_id: str
    name: str = "Wallbox"
    phase: str = PHASE_ALL
    powered: bool = False
    plugged_in: bool = False
    max_charging_current: int = 16

    def __post_init__(self) -> None:
        validate_phase(self.phase)
        if self.max_charging_current < 0:
            raise ValueError("max_charging_current must not be negative")

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "device_id": self.device_id,
            "name": self.name,
            "phase": self.phase,
            "powered": self.powered,
            "plugged_in": self.plugged_in,
            "max_charging_current": self.max_charging_current,
        }


@dataclass
class SmartMeter:
    """Three-phase smart meter. All values are derived every tick."""

    kind: ClassVar[DeviceKind] = DeviceKind.SMART_METER

    device_id: str
    name: str = "Smart meter"
    power_phase_a_w: float = 0.0
    power_phase_b_w: float = 0.0
    power_phase_c_w: float = 0.0
    total_power_w: float = 0.0
    total_energy_consumed_kwh: float = 0.0
    total_energy_produced_kwh: float = 0.0

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "device_id": self.device_id,
            "name": self.name,
            "power_phase_a_w": round(self.power_phase_a_w, 2),
            "power_phase_b_w": round(self.power_phase_b_w, 2),
            "power_phase_c_w": round(self.power_phase_c_w, 2),
            "total_power_w": round(self.total_power_w, 2),
            "total_energy_consumed_kwh": round(self.total_energy_consumed_kwh, 6),
            "total_energy_produced_kwh": round(self.total_energy_produced_kwh, 6),
        }


Device = Union[SolarInverter, Stove, Car, Wallbox, SmartMeter]

DEVICE_CLASSES: dict[DeviceKind, type] = {
    DeviceKind.SOLAR_INVERTER: SolarInverter,
    DeviceKind.STOVE: Stove,
    DeviceKind.CAR: Car,
    DeviceKind.WALLBOX: Wallbox,
    DeviceKind.SMART_METER: SmartMeter,
}


def device_from_dict(data: dict) -> Device:
    """Create a device from the output of its ``to_dict``."""
    values = dict(data)
    kind = DeviceKind(values.pop("kind"))
    if kind is DeviceKind.CAR and values.get("last_charge_update"):
        values["last_charge_update"] = datetime.fromisoformat(values["last_charge_update"])
    return DEVICE_CLASSES[kind](**values)
