"""In-memory device registry hosting the simulated household.

The registry owns device identity, settings and state between ticks. The
engine reads a snapshot before a tick and the registry commits the whole
result after it.
"""

import copy
import logging
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional

from energy_simulation.config import SimulationConfig
from energy_simulation.errors import DeviceNotFoundError
from energy_simulation.models import (
    Car,
    ChargingLinks,
    Device,
    DeviceKind,
    HouseholdSnapshot,
    SmartMeter,
    SolarInverter,
    Stove,
    TickResult,
    Wallbox,
    new_device_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceDescriptor:
    """A device offered by discovery, not yet added to the registry."""

    kind: DeviceKind
    title: str


class DeviceRegistry:
    """Registry of simulated devices and the charging links between them."""

    def __init__(
        self,
        devices: Optional[Iterable[Device]] = None,
        links: Optional[ChargingLinks] = None,
        discovery_result_count: int = 2,
    ):
        """
        Initialize the registry.

        Args:
            devices: Initial devices
            links: Initial wallbox to car links
            discovery_result_count: Descriptors offered per discovery
        """
        self._devices: dict[str, Device] = {}
        self._links = links.copy() if links is not None else ChargingLinks()
        self.discovery_result_count = discovery_result_count
        for device in devices or ():
            self.add(device)

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "DeviceRegistry":
        """Create a registry holding the devices described by ``config``."""
        devices: list[Device] = []
        for inverter in config.inverters:
            devices.append(
                SolarInverter(
                    device_id=new_device_id(),
                    name=inverter.name,
                    max_capacity_w=inverter.max_capacity_w,
                    phase=inverter.phase,
                )
            )
        for stove in config.stoves:
            devices.append(
                Stove(
                    device_id=new_device_id(),
                    name=stove.name,
                    max_power_consumption_w=stove.max_power_consumption_w,
                    phase=stove.phase,
                )
            )
        for car in config.cars:
            devices.append(
                Car(
                    device_id=new_device_id(),
                    name=car.name,
                    capacity_wh=car.capacity_wh,
                    battery_level=car.battery_level,
                    min_charging_current=car.min_charging_current,
                )
            )
        for wallbox in config.wallboxes:
            devices.append(
                Wallbox(
                    device_id=new_device_id(),
                    name=wallbox.name,
                    phase=wallbox.phase,
                    max_charging_current=wallbox.max_charging_current,
                )
            )
        for meter in config.smart_meters:
            devices.append(SmartMeter(device_id=new_device_id(), name=meter.name))

        logger.info("Created registry with %d devices", len(devices))
        return cls(devices, discovery_result_count=config.discovery_result_count)

    @property
    def links(self) -> ChargingLinks:
        """Wallbox to car links. Change them through the charging actions only."""
        return self._links

    def add(self, device: Device) -> Device:
        """
        Register a device.

        Raises:
            ValueError: If a device with the same id is already registered
        """
        if device.device_id in self._devices:
            raise ValueError(f"Device {device.device_id} is already registered")
        self._devices[device.device_id] = device
        logger.debug("Added %s %s (%s)", device.kind.value, device.name, device.device_id)
        return device

    def remove(self, device_id: str) -> Device:
        """
        Unregister a device, releasing any charging link it takes part in.

        Raises:
            DeviceNotFoundError: If no such device is registered
        """
        device = self.find_by_id(device_id)

        if device.kind is DeviceKind.CAR:
            wallbox_id = self._links.disconnect_car(device_id)
            if wallbox_id is not None:
                self.update(replace(self._devices[wallbox_id], plugged_in=False))
        elif device.kind is DeviceKind.WALLBOX:
            car_id = self._links.disconnect_wallbox(device_id)
            if car_id is not None:
                self.update(
                    replace(self._devices[car_id], plugged_in=False, last_charge_update=None)
                )

        del self._devices[device_id]
        logger.debug("Removed %s %s (%s)", device.kind.value, device.name, device_id)
        return device

    def get(self, device_id: Optional[str]) -> Optional[Device]:
        if device_id is None:
            return None
        return self._devices.get(device_id)

    def find_by_id(self, device_id: str) -> Device:
        """
        Look up a device by id.

        Raises:
            DeviceNotFoundError: If no such device is registered
        """
        try:
            return self._devices[device_id]
        except KeyError:
            raise DeviceNotFoundError(device_id) from None

    def filter_by_kind(self, kind: DeviceKind) -> list[Device]:
        """All devices of one class, in registration order."""
        return [device for device in self._devices.values() if device.kind is kind]

    def update(self, device: Device) -> Device:
        """
        Replace the stored record of an already registered device.

        Raises:
            DeviceNotFoundError: If no such device is registered
        """
        if device.device_id not in self._devices:
            raise DeviceNotFoundError(device.device_id)
        self._devices[device.device_id] = device
        return device

    def discover(self, kind: DeviceKind, count: Optional[int] = None) -> list[DeviceDescriptor]:
        """
        Offer devices of ``kind`` that could be added.

        Args:
            kind: Device class to discover
            count: Number of descriptors, defaults to discovery_result_count

        Returns:
            List of device descriptors
        """
        if count is None:
            count = self.discovery_result_count
        return [DeviceDescriptor(kind=kind, title=kind.display_name) for _ in range(count)]

    def snapshot(self) -> HouseholdSnapshot:
        """Copy the current devices and links for a tick to read."""
        return HouseholdSnapshot(
            devices=tuple(copy.copy(device) for device in self._devices.values()),
            links=self._links.copy(),
        )

    def commit(self, result: TickResult) -> None:
        """Store the device records computed by a tick."""
        for device in result.devices:
            if device.device_id in self._devices:
                self._devices[device.device_id] = device
            else:
                logger.debug("Dropping tick result for removed device %s", device.device_id)

    def __iter__(self) -> Iterator[Device]:
        return iter(list(self._devices.values()))

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices
