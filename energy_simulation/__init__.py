"""
Energy Simulation - Synthetic household energy grid for home automation demos

This package simulates a small household installation:
- Solar inverters following the sun between sunrise and sunset
- An electric stove running a fixed duty cycle
- Electric vehicles and the wallboxes charging them
- A three-phase smart meter reconciling all of the above

Readings can be written as JSON lines or to a local InfluxDB instance.
"""

__all__ = ["__version__"]
__version__ = "0.3.0"
