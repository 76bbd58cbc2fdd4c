"""Gateway interfaces for external services used by the coordinator."""

from .command_channel import ICommandChannel
from .device_registry_gateway import IDeviceRegistryGateway

__all__ = ["ICommandChannel", "IDeviceRegistryGateway"]
