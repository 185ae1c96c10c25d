"""Exceptions raised by the device host around the simulation."""


class SimulationError(Exception):
    """Base class for simulation errors."""


class DeviceNotFoundError(SimulationError, KeyError):
    """No device with the requested id is registered."""

    def __init__(self, device_id: str):
        super().__init__(device_id)
        self.device_id = device_id

    def __str__(self) -> str:
        return f"Device not found: {self.device_id}"


class ActionNotSupportedError(SimulationError):
    """The device class has no action of the requested name."""


class HardwareNotAvailableError(SimulationError):
    """The action needs hardware that is not available, e.g. a free wallbox."""
