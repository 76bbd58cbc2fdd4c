"""
Device Directory - Application Layer

Resolves device metadata and line membership from the device registry.
Results are kept in two TTL caches; when the registry cannot be reached the
directory degrades to fallback metadata and canonical line layouts.
"""

from datetime import timedelta
from typing import Dict, Optional, Tuple

from iiot_coordinator.domain.entities.device import DeviceMetadata, DeviceTwin
from iiot_coordinator.domain.entities.errors import DeviceRegistryError
from iiot_coordinator.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iiot_coordinator.domain.services.device_classifier import (
    canonical_line_devices,
    classify_device_type,
    extract_line_number,
)
from iiot_coordinator.shared import TTLCache, get_logger

logger = get_logger(__name__)

UNKNOWN_STATE = "unknown"


class DeviceDirectory:
    """Cache-backed resolver for device metadata and line membership."""

    def __init__(
        self,
        registry_gateway: IDeviceRegistryGateway,
        cache_ttl: timedelta = timedelta(minutes=30),
        primary_line_id: str = "Line1",
        primary_line_name: str = "Primary Assembly Line",
        device_cache: Optional[TTLCache[str, DeviceMetadata]] = None,
        line_cache: Optional[TTLCache[str, Tuple[str, ...]]] = None,
    ):
        """
        Args:
            registry_gateway: Gateway used to read twins
            cache_ttl: Lifetime of both cache kinds
            primary_line_id: Line assigned to devices resolved in fallback mode
            primary_line_name: Display name of the primary line
        """
        self.registry_gateway = registry_gateway
        self.primary_line_id = primary_line_id
        self.primary_line_name = primary_line_name
        self._devices = (
            device_cache if device_cache is not None else TTLCache(cache_ttl)
        )
        self._lines = line_cache if line_cache is not None else TTLCache(cache_ttl)

    async def resolve_device(self, device_id: str) -> DeviceMetadata:
        """
        Resolve the metadata of a device.

        Raises:
            UnknownDeviceTypeError: If the device type cannot be determined
        """
        cached = self._devices.get(device_id)
        if cached is not None:
            logger.debug("directory.device.cache_hit", device_id=device_id)
            return cached

        try:
            twin = await self.registry_gateway.get_twin(device_id)
            metadata = self._metadata_from_twin(twin)
            logger.info(
                "directory.device.resolved",
                device_id=device_id,
                device_type=metadata.device_type.value,
                line_id=metadata.line_id,
            )
        except DeviceRegistryError as e:
            metadata = self._fallback_metadata(device_id)
            logger.warning(
                "directory.device.fallback",
                device_id=device_id,
                line_id=metadata.line_id,
                error=e.message,
                status_code=e.status_code,
            )

        self._devices.set(device_id, metadata)
        return metadata

    async def resolve_line_members(self, line_id: str) -> Tuple[str, ...]:
        """
        Resolve the ordered devices of a line.

        Returns an empty tuple when the registry is unavailable and the line
        id carries no numeric suffix to build the canonical layout from.
        """
        cached = self._lines.get(line_id)
        if cached is not None:
            logger.debug("directory.line.cache_hit", line_id=line_id)
            return cached

        try:
            twins = await self.registry_gateway.list_twins()
        except DeviceRegistryError as e:
            members = self._fallback_members(line_id)
            logger.warning(
                "directory.line.fallback",
                line_id=line_id,
                devices=list(members),
                error=e.message,
            )
            if members:
                self._lines.set(line_id, members)
            return members

        ordered: Dict[str, None] = {}
        for twin in twins:
            if twin.reported_line_id == line_id:
                ordered.setdefault(twin.device_id, None)
        members = tuple(ordered)

        logger.info("directory.line.resolved", line_id=line_id, count=len(members))
        self._lines.set(line_id, members)
        return members

    def invalidate(self) -> None:
        self._devices.clear()
        self._lines.clear()
        logger.info("directory.invalidated")

    def _metadata_from_twin(self, twin: DeviceTwin) -> DeviceMetadata:
        reported = twin.reported
        status = reported.get("status")
        if not isinstance(status, dict):
            status = {}
        return DeviceMetadata(
            device_id=twin.device_id,
            device_type=classify_device_type(
                twin.device_id, reported.get("deviceType")
            ),
            line_id=_optional_str(reported.get("lineId")),
            line_name=_optional_str(reported.get("lineName")),
            connection_status=_optional_str(status.get("connectionStatus")),
            health=_optional_str(status.get("health")),
            state=_optional_str(status.get("state")),
        )

    def _fallback_metadata(self, device_id: str) -> DeviceMetadata:
        return DeviceMetadata(
            device_id=device_id,
            device_type=classify_device_type(device_id),
            line_id=self.primary_line_id,
            line_name=self.primary_line_name,
            connection_status=UNKNOWN_STATE,
            health=UNKNOWN_STATE,
            state=UNKNOWN_STATE,
            is_fallback=True,
        )

    @staticmethod
    def _fallback_members(line_id: str) -> Tuple[str, ...]:
        line_number = extract_line_number(line_id)
        if line_number is None:
            return ()
        return canonical_line_devices(line_number)


def _optional_str(value) -> Optional[str]:
    return str(value) if value is not None else None
