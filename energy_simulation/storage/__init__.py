"""Storage modules for simulated telemetry."""

from energy_simulation.storage.influxdb_client import (
    InfluxDBStorage,
    InfluxDBConfig,
)

__all__ = [
    "InfluxDBStorage",
    "InfluxDBConfig",
]
