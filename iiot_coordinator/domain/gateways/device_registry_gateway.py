"""
Device Registry Gateway Interface - Domain Layer

This module defines the interface for the device registry / twin service
that stores reported and desired properties and relays direct methods.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from iiot_coordinator.domain.entities.device import DeviceTwin, DirectMethodResponse


class IDeviceRegistryGateway(ABC):
    """Interface for Device Registry Gateway."""

    @abstractmethod
    async def get_twin(self, device_id: str) -> DeviceTwin:
        """
        Retrieve the twin of a single device.

        Args:
            device_id: Registry identifier of the device

        Returns:
            DeviceTwin: Connection state and reported/desired properties

        Raises:
            DeviceNotFoundError: If the registry has no such device
            DeviceRegistryError: If communication with the registry fails
        """
        pass

    @abstractmethod
    async def list_twins(self) -> List[DeviceTwin]:
        """Retrieve every twin in the registry, following pagination."""
        pass

    @abstractmethod
    async def invoke_method(
        self,
        device_id: str,
        method_name: str,
        payload: Optional[Dict[str, Any]] = None,
        *,
        timeout_seconds: float,
    ) -> DirectMethodResponse:
        """
        Invoke a direct method on a connected device and wait for its reply.

        Raises:
            DeviceRegistryError: On timeout or transport failure
        """
        pass

    @abstractmethod
    async def update_desired_property(
        self, device_id: str, property_name: str, value: Any
    ) -> None:
        """Patch a single desired property on the device twin."""
        pass
