"""Attribution of production and consumption to the three grid phases."""

import logging
import random
from typing import Iterable

from energy_simulation.models import ChargingLinks, Device, DeviceKind, PhasePower, PHASES
from .ev import charging_power_w, is_charging

logger = logging.getLogger(__name__)


class PhasePowerAggregator:
    """
    Sums device power onto phases A, B and C.

    Consumption is seeded with a base household load per phase plus a
    small random jitter, so an otherwise idle household still draws power.
    """

    def __init__(self, base_load_w: float = 100.0, jitter_w: float = 10.0):
        """
        Initialize the aggregator.

        Args:
            base_load_w: Idle load on each phase in watts
            jitter_w: Upper bound (exclusive) of the random load added per phase
        """
        if base_load_w < 0 or jitter_w < 0:
            raise ValueError("base_load_w and jitter_w must not be negative")
        self.base_load_w = base_load_w
        self.jitter_w = jitter_w

    def production(self, devices: Iterable[Device]) -> PhasePower:
        """Sum inverter output per phase. Values are negative while producing."""
        totals = PhasePower()
        for device in devices:
            if device.kind is DeviceKind.SOLAR_INVERTER:
                totals.add(device.phase, device.current_power_w)
        return totals

    def consumption(
        self,
        devices: Iterable[Device],
        links: ChargingLinks,
        rng: random.Random,
    ) -> PhasePower:
        """
        Sum household consumption per phase.

        Args:
            devices: Device records after this tick's state updates
            links: Wallbox to car relation
            rng: Source of the base load jitter

        Returns:
            Consumption per phase in watts
        """
        devices = list(devices)
        by_id = {device.device_id: device for device in devices}

        totals = PhasePower()
        for phase in PHASES:
            totals.add(phase, self.base_load_w + rng.random() * self.jitter_w)

        # Smart meters never count as consumers of their own measurement point
        for device in devices:
            if getattr(device, "consumer", False) and device.kind is not DeviceKind.SMART_METER:
                totals.add(device.phase, device.current_power_w)

        for wallbox in (d for d in devices if d.kind is DeviceKind.WALLBOX):
            car = by_id.get(links.car_for(wallbox.device_id))
            if is_charging(wallbox, car):
                power = charging_power_w(wallbox)
                logger.debug("* Wallbox %s consumes %.1f W", wallbox.name, power)
                totals.add(wallbox.phase, power)

        return totals
