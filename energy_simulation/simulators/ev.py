"""Electric vehicle simulator covering wallbox charging and battery drain."""

import logging
from dataclasses import replace
from typing import Optional

from energy_simulation.models import Car, DeviceKind, Wallbox
from .base import BaseSimulator, TickContext

logger = logging.getLogger(__name__)

GRID_VOLTAGE = 230


def charging_power_w(wallbox: Wallbox) -> float:
    """Power drawn by a wallbox charging at its maximum current."""
    return GRID_VOLTAGE * wallbox.max_charging_current


def is_charging(wallbox: Wallbox, car: Optional[Car]) -> bool:
    """Whether ``wallbox`` is actively charging ``car``."""
    return (
        wallbox.powered
        and wallbox.plugged_in
        and car is not None
        and car.battery_level < 100
    )


class CarSimulator(BaseSimulator):
    """
    Simulates an electric vehicle battery.

    Models:
    - Charging at 230 V times the wallbox's maximum current, committed in
      steps of at least one percent
    - A fixed drain of one percent per tick while unplugged
    - No charge while plugged in on a switched off or missing wallbox
    """

    kind = DeviceKind.CAR

    def update(
        self,
        device: Car,
        context: TickContext,
        wallbox: Optional[Wallbox] = None,
    ) -> Car:
        """
        Compute the car's battery state after this tick.

        Args:
            device: Current car record
            context: Time base of the running tick
            wallbox: The wallbox the car is linked to, if any

        Returns:
            The car record after this tick
        """
        if not device.plugged_in:
            return self._drain(device)
        if wallbox is not None and is_charging(wallbox, device):
            return self._charge(device, wallbox, context)
        # Not drawing power: the next charging tick starts a fresh warm-up
        if device.last_charge_update is not None:
            return replace(device, last_charge_update=None)
        return device

    def _drain(self, car: Car) -> Car:
        if car.battery_level <= 0:
            return car
        return replace(car, battery_level=car.battery_level - 1)

    def _charge(self, car: Car, wallbox: Wallbox, context: TickContext) -> Car:
        """
        Accumulate charge since the last committed update.

        The first charging tick only records the start time. Later ticks
        compute the energy delivered since that time and commit it once it
        amounts to at least one percent; smaller amounts keep accumulating.
        """
        if car.last_charge_update is None:
            return replace(car, last_charge_update=context.now)

        hours = (context.now - car.last_charge_update).total_seconds() / 3600
        charged_wh = charging_power_w(wallbox) * hours
        charged_percent = charged_wh * 100 / car.capacity_wh

        logger.debug(
            "* Car %s on wallbox %s: %.2f A for %.4f h, charged %.1f Wh (%.2f%%)",
            car.name,
            wallbox.name,
            wallbox.max_charging_current,
            hours,
            charged_wh,
            charged_percent,
        )

        if charged_percent < 1:
            return car

        level = int(self._clamp(car.battery_level + round(charged_percent), 0, 100))
        return replace(car, battery_level=level, last_charge_update=context.now)
