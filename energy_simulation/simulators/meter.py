"""Smart meter readings and energy accumulation."""

import logging
from dataclasses import replace

from energy_simulation.models import PhasePower, SmartMeter

logger = logging.getLogger(__name__)


def energy_kwh(power_w: float, interval_seconds: float) -> float:
    """Energy in kWh of a constant power held over an interval."""
    return power_w / 1000 * (interval_seconds / 3600)


class EnergyAccumulator:
    """
    Publishes phase readings to a smart meter and integrates its energy.

    Net import over the interval is added to the consumed counter, net
    export to the produced counter, so both only ever grow.
    """

    def update(
        self,
        meter: SmartMeter,
        production: PhasePower,
        consumption: PhasePower,
        interval_seconds: float,
    ) -> SmartMeter:
        """
        Compute the meter's readings after this tick.

        Args:
            meter: Current meter record
            production: Production per phase (negative watts)
            consumption: Consumption per phase (positive watts)
            interval_seconds: Length of the tick

        Returns:
            The meter record after this tick
        """
        net = consumption + production
        total_power = consumption.total + production.total
        delta = energy_kwh(total_power, interval_seconds)

        consumed = meter.total_energy_consumed_kwh
        produced = meter.total_energy_produced_kwh
        if total_power > 0:
            consumed += delta
        else:
            produced -= delta

        logger.debug("* Updating smart meter %s: %.1f W", meter.name, total_power)

        return replace(
            meter,
            power_phase_a_w=net.a,
            power_phase_b_w=net.b,
            power_phase_c_w=net.c,
            total_power_w=total_power,
            total_energy_consumed_kwh=consumed,
            total_energy_produced_kwh=produced,
        )
