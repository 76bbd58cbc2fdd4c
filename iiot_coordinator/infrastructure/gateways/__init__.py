"""HTTP gateway implementations."""

from .device_registry_gateway import DeviceRegistryGateway

__all__ = ["DeviceRegistryGateway"]
