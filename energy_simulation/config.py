"""Configuration management for the household energy simulation."""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from energy_simulation.storage import InfluxDBConfig


@dataclass
class LocationConfig:
    """Location used for sunrise and sunset."""

    latitude: float = 48.0
    longitude: float = 10.0
    utc_offset_hours: Optional[float] = None  # None = offset of the tick timestamp


@dataclass
class GridConfig:
    """Idle household load spread over the three phases."""

    base_load_w: float = 100.0
    base_load_jitter_w: float = 10.0


@dataclass
class InverterConfig:
    """Solar inverter settings."""

    name: str = "Solar inverter"
    max_capacity_w: float = 5000.0
    phase: str = "All"


@dataclass
class StoveConfig:
    """Stove settings."""

    name: str = "Stove"
    max_power_consumption_w: float = 2000.0
    phase: str = "A"


@dataclass
class CarConfig:
    """Electric car settings and initial battery level."""

    name: str = "Electric car"
    capacity_wh: float = 50000.0
    battery_level: int = 50
    min_charging_current: int = 6


@dataclass
class WallboxConfig:
    """Wallbox settings."""

    name: str = "Wallbox"
    phase: str = "All"
    max_charging_current: int = 16


@dataclass
class SmartMeterConfig:
    """Smart meter settings."""

    name: str = "Smart meter"


@dataclass
class SimulationConfig:
    """Main simulation configuration."""

    interval_seconds: float = 5
    output_file: Optional[str] = None
    seed: Optional[int] = None
    discovery_result_count: int = 2

    location: LocationConfig = field(default_factory=LocationConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    inverters: list[InverterConfig] = field(default_factory=lambda: [InverterConfig()])
    stoves: list[StoveConfig] = field(default_factory=lambda: [StoveConfig()])
    cars: list[CarConfig] = field(default_factory=lambda: [CarConfig()])
    wallboxes: list[WallboxConfig] = field(default_factory=lambda: [WallboxConfig()])
    smart_meters: list[SmartMeterConfig] = field(default_factory=lambda: [SmartMeterConfig()])
    influxdb: InfluxDBConfig = field(default_factory=InfluxDBConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationConfig":
        """Create config from dictionary."""
        defaults = cls()
        try:
            return cls(
                interval_seconds=data.get("interval_seconds", 5),
                output_file=data.get("output_file"),
                seed=data.get("seed"),
                discovery_result_count=data.get("discovery_result_count", 2),
                location=LocationConfig(**data.get("location", {})),
                grid=GridConfig(**data.get("grid", {})),
                inverters=_device_list(data, "inverters", InverterConfig, defaults.inverters),
                stoves=_device_list(data, "stoves", StoveConfig, defaults.stoves),
                cars=_device_list(data, "cars", CarConfig, defaults.cars),
                wallboxes=_device_list(data, "wallboxes", WallboxConfig, defaults.wallboxes),
                smart_meters=_device_list(data, "smart_meters", SmartMeterConfig, defaults.smart_meters),
                influxdb=InfluxDBConfig(**data.get("influxdb", {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration format: {e}") from e

    @classmethod
    def from_file(cls, path: Path) -> "SimulationConfig":
        """Load config from JSON file."""
        try:
            with open(path) as f:
                data = json.load(f)
            return cls.from_dict(data)
        except FileNotFoundError as exc:
            raise FileNotFoundError(
                f"Configuration file not found: {path}",
            ) from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in configuration file {path}: {exc}") from exc
        except (OSError, ValueError) as exc:
            raise RuntimeError(
                f"Failed to load configuration from {path}: {exc}",
            ) from exc

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return asdict(self)

    def to_file(self, path: Path) -> None:
        """Save config to JSON file."""
        try:
            with open(path, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as exc:
            raise RuntimeError(
                f"Failed to save configuration to {path}: {exc}",
            ) from exc


def _device_list(data: dict, key: str, config_cls: type, default: list) -> list:
    """Build a list of device configs, keeping the default when ``key`` is absent."""
    if key not in data:
        return default
    entries = data[key]
    if not isinstance(entries, list):
        raise TypeError(f"{key} must be a list")
    return [config_cls(**entry) for entry in entries]


# Default configuration template
DEFAULT_CONFIG = SimulationConfig()
