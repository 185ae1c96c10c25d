"""Simulators for the household's devices and meter."""

from .base import BaseSimulator, TickContext
from .ev import CarSimulator, charging_power_w, is_charging
from .meter import EnergyAccumulator, energy_kwh
from .phases import PhasePowerAggregator
from .solar import SolarInverterSimulator, daylight_factor
from .solar_position import CIVIL_ZENITH, calculate_sunrise_sunset
from .stove import StoveSimulator

__all__ = [
    "BaseSimulator",
    "CIVIL_ZENITH",
    "CarSimulator",
    "EnergyAccumulator",
    "PhasePowerAggregator",
    "SolarInverterSimulator",
    "StoveSimulator",
    "TickContext",
    "calculate_sunrise_sunset",
    "charging_power_w",
    "daylight_factor",
    "energy_kwh",
    "is_charging",
]
