"""Snapshots of the household before a tick and results after it."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Optional

from .devices import PHASE_ALL, PHASES, Device, DeviceKind, device_from_dict
from .links import ChargingLinks


@dataclass
class PhasePower:
    """Power in watts attributed to each of the three phases."""

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0

    def add(self, phase: str, watts: float) -> None:
        """Add ``watts`` to ``phase``, split evenly across all phases for ``All``."""
        if phase == PHASE_ALL:
            share = watts / 3
            self.a += share
            self.b += share
            self.c += share
        elif phase in PHASES:
            setattr(self, phase.lower(), getattr(self, phase.lower()) + watts)
        else:
            raise ValueError(f"Unknown phase: {phase!r}")

    def get(self, phase: str) -> float:
        if phase not in PHASES:
            raise ValueError(f"Unknown phase: {phase!r}")
        return getattr(self, phase.lower())

    @property
    def total(self) -> float:
        return self.a + self.b + self.c

    def __add__(self, other: "PhasePower") -> "PhasePower":
        return PhasePower(self.a + other.a, self.b + other.b, self.c + other.c)

    def to_dict(self) -> dict:
        return {
            "A": round(self.a, 3),
            "B": round(self.b, 3),
            "C": round(self.c, 3),
        }


@dataclass(frozen=True)
class HouseholdSnapshot:
    """Read-only view of all devices and charging links taken before a tick."""

    devices: tuple
    links: ChargingLinks = field(default_factory=ChargingLinks)

    def of_kind(self, kind: DeviceKind) -> list:
        return [device for device in self.devices if device.kind is kind]

    def find(self, device_id: Optional[str]) -> Optional[Device]:
        if device_id is None:
            return None
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None

    def __iter__(self) -> Iterator[Device]:
        return iter(self.devices)

    def __len__(self) -> int:
        return len(self.devices)


@dataclass
class TickResult:
    """Complete household state after one simulation tick."""

    timestamp: datetime
    interval_seconds: float
    sunrise: datetime
    sunset: datetime
    production: PhasePower
    consumption: PhasePower
    devices: tuple
    links: ChargingLinks = field(default_factory=ChargingLinks)

    @property
    def total_power_w(self) -> float:
        """Net household power. Positive = importing, negative = exporting."""
        return self.consumption.total + self.production.total

    def of_kind(self, kind: DeviceKind) -> list:
        return [device for device in self.devices if device.kind is kind]

    def find(self, device_id: str) -> Optional[Device]:
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "interval_seconds": self.interval_seconds,
            "sunrise": self.sunrise.isoformat(),
            "sunset": self.sunset.isoformat(),
            "production": self.production.to_dict(),
            "consumption": self.consumption.to_dict(),
            "total_power_w": round(self.total_power_w, 3),
            "devices": [device.to_dict() for device in self.devices],
            "links": self.links.to_dict(),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> "TickResult":
        """Create TickResult from dictionary."""
        production = data["production"]
        consumption = data["consumption"]
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            interval_seconds=data["interval_seconds"],
            sunrise=datetime.fromisoformat(data["sunrise"]),
            sunset=datetime.fromisoformat(data["sunset"]),
            production=PhasePower(production["A"], production["B"], production["C"]),
            consumption=PhasePower(consumption["A"], consumption["B"], consumption["C"]),
            devices=tuple(device_from_dict(d) for d in data["devices"]),
            links=ChargingLinks(data.get("links", {})),
        )
