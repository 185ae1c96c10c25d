"""Solar inverter simulator following a cosine curve over the daylight hours."""

import logging
import math
from dataclasses import replace
from datetime import datetime

from energy_simulation.models import DeviceKind, SolarInverter
from .base import BaseSimulator, TickContext

logger = logging.getLogger(__name__)


def daylight_factor(now: datetime, sunrise: datetime, sunset: datetime) -> float:
    """
    Fraction of peak output for the given time of day.

    Maps the daylight span onto -90..90 degrees and takes the cosine, so the
    curve is 0 at sunrise and sunset and 1 at the midpoint between them.

    Returns:
        Factor in [0, 1], 0 outside the open interval (sunrise, sunset)
    """
    if not sunrise < now < sunset:
        return 0.0

    daylight_ms = (sunset - sunrise).total_seconds() * 1000
    since_sunrise_ms = (now - sunrise).total_seconds() * 1000
    degrees = (since_sunrise_ms * 180 / daylight_ms) - 90
    return math.cos(math.radians(degrees))


class SolarInverterSimulator(BaseSimulator):
    """
    Simulates solar inverter output from the position of the sun.

    Models:
    - Zero output between sunset and sunrise
    - Cosine-shaped output peaking at the midpoint of daylight
    """

    kind = DeviceKind.SOLAR_INVERTER

    def update(self, device: SolarInverter, context: TickContext) -> SolarInverter:
        """
        Recompute the inverter's output for the current tick.

        Production is reported as negative power.
        """
        production = daylight_factor(context.now, context.sunrise, context.sunset) * device.max_capacity_w
        if production:
            logger.debug("* Inverter %s production: %.1f W", device.name, production)
        return replace(device, current_power_w=-production)
