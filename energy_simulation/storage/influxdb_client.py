"""InfluxDB client for local time series storage of simulated telemetry.

This module writes every simulated device and the per-phase balance of a
tick to an InfluxDB instance, so the simulated household can be charted
next to real installations.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from influxdb_client import InfluxDBClient, Point
from influxdb_client.client.write_api import SYNCHRONOUS, WriteOptions

from energy_simulation.models import TickResult

logger = logging.getLogger(__name__)


@dataclass
class InfluxDBConfig:
    """Configuration for InfluxDB connection.

    Supports environment variable overrides:
    - INFLUXDB_URL: Server URL
    - INFLUXDB_TOKEN: Authentication token
    - INFLUXDB_ORG: Organization name
    - INFLUXDB_BUCKET: Bucket name

    Attributes:
        url: InfluxDB server URL (e.g., "http://localhost:8086")
        token: Authentication token for InfluxDB
        org: Organization name in InfluxDB
        bucket: Bucket name for storing data
        enabled: Whether InfluxDB storage is enabled
        batch_size: Number of points to batch before writing (default: 1)
        flush_interval_ms: Milliseconds between batch flushes (default: 1000)
    """

    url: str = "http://localhost:8086"
    token: str = ""
    org: str = "energy-simulation"
    bucket: str = "household"
    enabled: bool = False
    batch_size: int = 1
    flush_interval_ms: int = 1000

    def __post_init__(self) -> None:
        """Apply environment variable overrides only when values are at defaults."""
        if self.url == "http://localhost:8086":
            self.url = os.environ.get("INFLUXDB_URL", self.url)
        if self.token == "":
            self.token = os.environ.get("INFLUXDB_TOKEN", self.token)
        if self.org == "energy-simulation":
            self.org = os.environ.get("INFLUXDB_ORG", self.org)
        if self.bucket == "household":
            self.bucket = os.environ.get("INFLUXDB_BUCKET", self.bucket)


class InfluxDBStorage:
    """InfluxDB storage client for simulation ticks.

    Each device becomes one point in the measurement named after its
    device kind, tagged with its id and name. The phase balance of the
    tick goes to the ``phases`` measurement.

    Example:
        >>> config = InfluxDBConfig(token="my-token", enabled=True)
        >>> with InfluxDBStorage(config) as storage:
        ...     storage.write(result)
    """

    MEASUREMENT_PHASES = "phases"

    def __init__(self, config: InfluxDBConfig) -> None:
        """Initialize InfluxDB storage.

        Args:
            config: InfluxDB configuration

        Raises:
            ValueError: If storage is enabled without a token
        """
        self.config = config
        self._client: Optional[InfluxDBClient] = None
        self._write_api = None

        if not config.enabled:
            logger.info("InfluxDB storage is disabled")
            return

        if not config.token:
            raise ValueError("InfluxDB token is required when storage is enabled")

        self._connect()

    def _connect(self) -> None:
        """Establish connection to InfluxDB."""
        try:
            self._client = InfluxDBClient(
                url=self.config.url,
                token=self.config.token,
                org=self.config.org,
            )

            if self.config.batch_size > 1:
                self._write_api = self._client.write_api(
                    write_options=WriteOptions(
                        batch_size=self.config.batch_size,
                        flush_interval=self.config.flush_interval_ms,
                    )
                )
            else:
                self._write_api = self._client.write_api(write_options=SYNCHRONOUS)

            logger.info(
                "Connected to InfluxDB at %s (org=%s, bucket=%s)",
                self.config.url,
                self.config.org,
                self.config.bucket,
            )
        except Exception as e:
            logger.exception("Failed to connect to InfluxDB: %s", e)
            raise

    def is_connected(self) -> bool:
        """Check if connected to InfluxDB."""
        if not self.config.enabled:
            return False
        return self._client is not None and self._write_api is not None

    def health_check(self) -> bool:
        """Perform a health check on the InfluxDB connection."""
        if not self.is_connected():
            return False

        try:
            health = self._client.health()
            return health.status == "pass"
        except Exception as e:
            logger.warning("InfluxDB health check failed: %s", e)
            return False

    def write(self, result: TickResult) -> bool:
        """Write one tick to InfluxDB.

        Args:
            result: Tick result to write

        Returns:
            True if write was successful, False otherwise
        """
        return self.write_batch([result])

    def write_batch(self, results: list[TickResult]) -> bool:
        """Write several ticks to InfluxDB in one request.

        Returns:
            True if the write was successful, False otherwise
        """
        if not self.config.enabled:
            return True  # Silently succeed when disabled

        if not self.is_connected():
            logger.warning("Not connected to InfluxDB, skipping write")
            return False

        try:
            points = []
            for result in results:
                points.extend(self._tick_to_points(result))

            self._write_api.write(
                bucket=self.config.bucket,
                org=self.config.org,
                record=points,
            )
            logger.debug("Wrote %d points to InfluxDB (%d ticks)", len(points), len(results))
            return True
        except Exception as e:
            logger.exception("Failed to write to InfluxDB: %s", e)
            return False

    def _tick_to_points(self, result: TickResult) -> list:
        """Convert a TickResult to InfluxDB points."""
        timestamp = result.timestamp
        points = []

        for device in result.devices:
            point = (
                Point(device.kind.value)
                .tag("device_id", device.device_id)
                .tag("name", device.name)
                .time(timestamp)
            )
            for key, value in device.to_dict().items():
                # Strings are identity or settings and already tags; skip them
                if isinstance(value, (bool, int, float)):
                    point = point.field(key, value)
            points.append(point)

        phases_point = (
            Point(self.MEASUREMENT_PHASES)
            .field("production_a_w", result.production.a)
            .field("production_b_w", result.production.b)
            .field("production_c_w", result.production.c)
            .field("consumption_a_w", result.consumption.a)
            .field("consumption_b_w", result.consumption.b)
            .field("consumption_c_w", result.consumption.c)
            .field("total_power_w", result.total_power_w)
            .time(timestamp)
        )
        points.append(phases_point)

        return points

    def close(self) -> None:
        """Close the InfluxDB connection."""
        if self._write_api:
            try:
                self._write_api.close()
            except Exception as e:
                logger.debug("Error closing InfluxDB write API: %s", e)
            self._write_api = None

        if self._client:
            try:
                self._client.close()
            except Exception as e:
                logger.debug("Error closing InfluxDB client: %s", e)
            self._client = None

        logger.info("Closed InfluxDB connection")

    def __enter__(self) -> "InfluxDBStorage":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
