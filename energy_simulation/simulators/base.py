"""Base simulator class with common functionality."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from energy_simulation.models import DeviceKind


@dataclass(frozen=True)
class TickContext:
    """Time base shared by all device models during one tick."""

    now: datetime
    interval_seconds: float
    sunrise: datetime
    sunset: datetime

    @property
    def is_daylight(self) -> bool:
        return self.sunrise < self.now < self.sunset


class BaseSimulator(ABC):
    """Abstract base class for per-device-class evolution rules."""

    kind: DeviceKind

    def _clamp(self, value: float, min_val: float, max_val: float) -> float:
        """Clamp value between min and max."""
        return max(min_val, min(max_val, value))

    @abstractmethod
    def update(self, device: Any, context: TickContext) -> Any:
        """
        Compute the next state of a device.

        Implementations return a new device record and never mutate
        the one they are given.

        Args:
            device: Current device record
            context: Time base of the running tick

        Returns:
            The device record after this tick
        """
        pass
