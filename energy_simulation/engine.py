"""
Simulation engine - Advances the simulated household one tick at a time.

Supports continuous real-time ticking and fast historical generation.
"""

import logging
import random
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from energy_simulation.config import SimulationConfig
from energy_simulation.models import Device, DeviceKind, HouseholdSnapshot, TickResult
from energy_simulation.registry import DeviceRegistry
from energy_simulation.simulators import (
    CarSimulator,
    EnergyAccumulator,
    PhasePowerAggregator,
    SolarInverterSimulator,
    StoveSimulator,
    TickContext,
    calculate_sunrise_sunset,
)
from energy_simulation.storage import InfluxDBStorage

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Orchestrates all device simulators for one household.

    A tick reads an immutable snapshot of the registry, computes the next
    record of every device, balances the phases and updates the smart
    meters. Nothing is written back until the whole tick is computed.
    """

    def __init__(
        self,
        registry: Optional[DeviceRegistry] = None,
        latitude: float = 48.0,
        longitude: float = 10.0,
        utc_offset_hours: Optional[float] = None,
        base_load_w: float = 100.0,
        base_load_jitter_w: float = 10.0,
        interval_seconds: float = 5,
        seed: Optional[int] = None,
    ):
        """
        Initialize the simulation engine.

        Args:
            registry: Registry holding the simulated devices
            latitude: Location latitude for sunrise and sunset
            longitude: Location longitude for sunrise and sunset
            utc_offset_hours: Local time offset, None to use the tick timestamp's
            base_load_w: Idle household load per phase
            base_load_jitter_w: Random extra load per phase (upper bound)
            interval_seconds: Seconds covered by one tick
            seed: Random seed for reproducibility
        """
        self.registry = registry if registry is not None else DeviceRegistry()
        self.latitude = latitude
        self.longitude = longitude
        self.utc_offset_hours = utc_offset_hours
        self.interval_seconds = interval_seconds
        self._random = random.Random(seed)

        self.solar = SolarInverterSimulator()
        self.stove = StoveSimulator()
        self.car = CarSimulator()
        self.phases = PhasePowerAggregator(base_load_w=base_load_w, jitter_w=base_load_jitter_w)
        self.meter = EnergyAccumulator()

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        registry: Optional[DeviceRegistry] = None,
    ) -> "SimulationEngine":
        """Create an engine, and its registry unless given, from configuration."""
        return cls(
            registry=registry if registry is not None else DeviceRegistry.from_config(config),
            latitude=config.location.latitude,
            longitude=config.location.longitude,
            utc_offset_hours=config.location.utc_offset_hours,
            base_load_w=config.grid.base_load_w,
            base_load_jitter_w=config.grid.base_load_jitter_w,
            interval_seconds=config.interval_seconds,
            seed=config.seed,
        )

    def tick(
        self,
        snapshot: HouseholdSnapshot,
        now: datetime,
        interval_seconds: float,
        rng: Optional[random.Random] = None,
    ) -> TickResult:
        """
        Compute the household state after one tick.

        The result depends only on the arguments; neither the snapshot nor
        the registry is modified.

        Args:
            snapshot: Devices and links before the tick
            now: Wall-clock time of the tick
            interval_seconds: Seconds covered by the tick
            rng: Source of randomness, defaults to the engine's seeded generator

        Returns:
            TickResult with the new device records and phase balance
        """
        if rng is None:
            rng = self._random

        sunrise, sunset = calculate_sunrise_sunset(
            self.latitude, self.longitude, now, self.utc_offset_hours
        )
        context = TickContext(
            now=now,
            interval_seconds=interval_seconds,
            sunrise=sunrise,
            sunset=sunset,
        )

        updated = [self._update_device(device, snapshot, context) for device in snapshot]

        production = self.phases.production(updated)
        consumption = self.phases.consumption(updated, snapshot.links, rng)

        devices = tuple(
            self.meter.update(device, production, consumption, interval_seconds)
            if device.kind is DeviceKind.SMART_METER
            else device
            for device in updated
        )

        logger.debug(
            "* Grand total power consumption: %.1f W",
            consumption.total + production.total,
        )

        return TickResult(
            timestamp=now,
            interval_seconds=interval_seconds,
            sunrise=sunrise,
            sunset=sunset,
            production=production,
            consumption=consumption,
            devices=devices,
            links=snapshot.links.copy(),
        )

    def _update_device(
        self,
        device: Device,
        snapshot: HouseholdSnapshot,
        context: TickContext,
    ) -> Device:
        if device.kind is DeviceKind.SOLAR_INVERTER:
            return self.solar.update(device, context)
        if device.kind is DeviceKind.STOVE:
            return self.stove.update(device, context)
        if device.kind is DeviceKind.CAR:
            wallbox = snapshot.find(snapshot.links.wallbox_for(device.device_id))
            return self.car.update(device, context, wallbox)
        # Wallboxes only change through actions; meters are updated last
        return device

    def step(
        self,
        now: Optional[datetime] = None,
        interval_seconds: Optional[float] = None,
    ) -> TickResult:
        """
        Run one tick against the registry and commit the result.

        Args:
            now: Timestamp of the tick. Defaults to current time.
            interval_seconds: Seconds covered by the tick, defaults to the engine's

        Returns:
            The committed TickResult
        """
        if now is None:
            now = datetime.now(timezone.utc)
        if interval_seconds is None:
            interval_seconds = self.interval_seconds

        result = self.tick(self.registry.snapshot(), now, interval_seconds)
        self.registry.commit(result)
        return result

    def run_historical(
        self,
        start: datetime,
        end: datetime,
        interval_seconds: Optional[float] = None,
    ) -> list[TickResult]:
        """
        Run ticks on a simulated clock from start to end inclusive.

        Args:
            start: Timestamp of the first tick
            end: Latest timestamp of a tick
            interval_seconds: Simulated seconds between ticks

        Returns:
            List of TickResults in order
        """
        if interval_seconds is None:
            interval_seconds = self.interval_seconds
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        results = []
        current = start
        interval = timedelta(seconds=interval_seconds)

        while current <= end:
            result = self.tick(self.registry.snapshot(), current, interval_seconds)
            self.registry.commit(result)
            results.append(result)
            current += interval

        return results


class SimulationRunner:
    """
    Runner for continuous or one-off simulation ticks.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        output_callback: Optional[Callable[[TickResult], None]] = None,
        output_file: Optional[Path] = None,
        storage: Optional[InfluxDBStorage] = None,
    ):
        """
        Initialize the runner.

        Args:
            engine: The simulation engine
            output_callback: Optional callback function for each tick
            output_file: Optional file path to append JSON lines
            storage: Optional InfluxDB storage for each tick
        """
        self.engine = engine
        self.output_callback = output_callback
        self.output_file = output_file
        self.storage = storage
        self._running = False

    def _output_data(self, result: TickResult) -> None:
        """Output a tick to configured destinations."""
        logger.info(
            "Tick %s: Production=%.1fW, Consumption=%.1fW, Grid=%.1fW",
            result.timestamp.isoformat(timespec="seconds"),
            result.production.total,
            result.consumption.total,
            result.total_power_w,
        )

        if self.output_callback:
            self.output_callback(result)

        if self.output_file:
            try:
                with open(self.output_file, "a") as f:
                    f.write(result.to_json(indent=None) + "\n")
            except OSError as e:
                logger.error("Failed to write to %s: %s", self.output_file, e)

        if self.storage:
            self.storage.write(result)

    def run_once(
        self,
        now: Optional[datetime] = None,
        interval_seconds: Optional[float] = None,
    ) -> TickResult:
        """Run and output a single tick."""
        result = self.engine.step(now, interval_seconds)
        self._output_data(result)
        return result

    def run_continuous(
        self,
        interval_seconds: Optional[float] = None,
        duration_seconds: Optional[float] = None,
    ) -> None:
        """
        Tick continuously on a fixed period.

        A tick always completes before the next one starts; the time a tick
        takes is subtracted from the following sleep.

        Args:
            interval_seconds: Seconds between ticks, defaults to the engine's
            duration_seconds: Optional total duration. None = run forever.
        """
        if interval_seconds is None:
            interval_seconds = self.engine.interval_seconds

        self._running = True
        start_time = time.monotonic()

        logger.info("Starting simulation with a tick every %ss", interval_seconds)

        try:
            while self._running:
                tick_started = time.monotonic()
                self.run_once(interval_seconds=interval_seconds)

                if duration_seconds is not None:
                    elapsed = time.monotonic() - start_time
                    if elapsed >= duration_seconds:
                        logger.info("Duration reached, stopping")
                        break

                sleep_time = interval_seconds - (time.monotonic() - tick_started)
                if sleep_time > 0:
                    time.sleep(sleep_time)

        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self._running = False

    def stop(self) -> None:
        """Stop the runner."""
        self._running = False
