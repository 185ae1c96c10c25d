"""Electric stove simulator with a fixed duty cycle."""

from dataclasses import replace

from energy_simulation.models import DeviceKind, Stove
from .base import BaseSimulator, TickContext

# Ticks per duty cycle and how many of them draw full power
CYCLE_LENGTH = 12
ACTIVE_TICKS = 4


class StoveSimulator(BaseSimulator):
    """
    Simulates a stove by switching between full power and off.

    While powered, a counter advances once per tick. The first
    ACTIVE_TICKS of every CYCLE_LENGTH ticks draw the stove's maximum
    power, the rest draw nothing, giving a one-third duty cycle.

    The cycle is tick-indexed: it advances once per tick regardless of the
    interval length. Energy is time-indexed and scales with the interval.
    """

    kind = DeviceKind.STOVE

    def update(self, device: Stove, context: TickContext) -> Stove:
        if not device.powered:
            return replace(device, current_power_w=0.0)

        position = device.cycle % CYCLE_LENGTH
        current_power = 0.0
        total_energy = device.total_energy_consumed_kwh

        if position < ACTIVE_TICKS:
            current_power = device.max_power_consumption_w
            total_energy += (device.max_power_consumption_w / 1000) / 3600 * context.interval_seconds

        return replace(
            device,
            current_power_w=current_power,
            total_energy_consumed_kwh=total_energy,
            cycle=position + 1,
        )
