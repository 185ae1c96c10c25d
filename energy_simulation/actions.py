"""Externally triggered device actions.

Actions change device state between ticks: switching the stove or a
wallbox on and off, setting charging currents and plugging cars in and
out. Plugging is all-or-nothing: the car, the wallbox and the link
between them change together or not at all.
"""

import logging
from dataclasses import replace
from typing import Any, Callable

from energy_simulation.errors import ActionNotSupportedError, HardwareNotAvailableError
from energy_simulation.models import Car, Device, DeviceKind, Wallbox
from energy_simulation.registry import DeviceRegistry

logger = logging.getLogger(__name__)

ACTION_POWER = "power"
ACTION_MAX_CHARGING_CURRENT = "max_charging_current"
ACTION_PLUGGED_IN = "plugged_in"
ACTION_MIN_CHARGING_CURRENT = "min_charging_current"


def plug_in(registry: DeviceRegistry, car_id: str) -> Wallbox:
    """
    Plug a car into the first free wallbox.

    Args:
        registry: Device registry
        car_id: Id of the car to plug in

    Returns:
        The wallbox the car is now connected to

    Raises:
        HardwareNotAvailableError: If every wallbox already has a car
    """
    car = registry.find_by_id(car_id)
    connected = registry.get(registry.links.wallbox_for(car_id))
    if connected is not None:
        return connected

    for wallbox in registry.filter_by_kind(DeviceKind.WALLBOX):
        if registry.links.is_free(wallbox.device_id):
            registry.links.connect(wallbox.device_id, car_id)
            registry.update(replace(car, plugged_in=True))
            wallbox = registry.update(replace(wallbox, plugged_in=True))
            logger.info("Plugged %s into %s", car.name, wallbox.name)
            return wallbox

    raise HardwareNotAvailableError("No free wallbox found")


def unplug(registry: DeviceRegistry, car_id: str) -> None:
    """Unplug a car and release the wallbox it was connected to."""
    car = registry.find_by_id(car_id)
    wallbox_id = registry.links.disconnect_car(car_id)
    registry.update(replace(car, plugged_in=False, last_charge_update=None))
    if wallbox_id is not None:
        wallbox = registry.find_by_id(wallbox_id)
        registry.update(replace(wallbox, plugged_in=False))
        logger.info("Unplugged %s from %s", car.name, wallbox.name)


def _set_power(registry: DeviceRegistry, device: Device, value: Any) -> Device:
    return registry.update(replace(device, powered=bool(value)))


def _set_max_charging_current(registry: DeviceRegistry, device: Device, value: Any) -> Device:
    return registry.update(replace(device, max_charging_current=int(value)))


def _set_min_charging_current(registry: DeviceRegistry, device: Device, value: Any) -> Device:
    return registry.update(replace(device, min_charging_current=int(value)))


def _set_plugged_in(registry: DeviceRegistry, device: Car, value: Any) -> Device:
    if value:
        plug_in(registry, device.device_id)
    else:
        unplug(registry, device.device_id)
    return registry.find_by_id(device.device_id)


_HANDLERS: dict[tuple[DeviceKind, str], Callable[[DeviceRegistry, Any, Any], Device]] = {
    (DeviceKind.STOVE, ACTION_POWER): _set_power,
    (DeviceKind.WALLBOX, ACTION_POWER): _set_power,
    (DeviceKind.WALLBOX, ACTION_MAX_CHARGING_CURRENT): _set_max_charging_current,
    (DeviceKind.CAR, ACTION_PLUGGED_IN): _set_plugged_in,
    (DeviceKind.CAR, ACTION_MIN_CHARGING_CURRENT): _set_min_charging_current,
}


def supported_actions(kind: DeviceKind) -> list[str]:
    """Names of the actions a device class accepts."""
    return [action for (handler_kind, action) in _HANDLERS if handler_kind is kind]


def execute_action(registry: DeviceRegistry, device_id: str, action: str, value: Any) -> Device:
    """
    Apply an action to a device.

    Args:
        registry: Device registry
        device_id: Target device id
        action: Action name, e.g. ``power`` or ``plugged_in``
        value: Action parameter

    Returns:
        The updated device record

    Raises:
        DeviceNotFoundError: If the device is not registered
        ActionNotSupportedError: If the device class has no such action
        HardwareNotAvailableError: If a car is plugged in with no free wallbox
        ValueError: If the new value is invalid for the device
    """
    device = registry.find_by_id(device_id)
    handler = _HANDLERS.get((device.kind, action))
    if handler is None:
        raise ActionNotSupportedError(
            f"Action {action!r} is not supported by {device.kind.value} devices"
        )

    logger.debug("Executing %s=%r on %s", action, value, device.name)
    return handler(registry, device, value)
