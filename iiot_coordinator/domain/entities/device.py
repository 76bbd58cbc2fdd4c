"""Domain entities describing devices, their twins and directory metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class DeviceType(str, Enum):
    """Device roles found on a production line."""

    PRESS = "Press"
    CONVEYOR = "Conveyor"
    QUALITY_STATION = "QualityStation"
    COMPRESSOR = "Compressor"

    @classmethod
    def parse(cls, value: Any) -> Optional["DeviceType"]:
        """Accept enum names, values or the legacy integer codes (0-3)."""
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            return members[value] if 0 <= value < len(members) else None
        text = str(value).strip()
        for member in cls:
            if text.lower() in (member.value.lower(), member.name.lower()):
                return member
        return None


class ConnectionState(str, Enum):
    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"


@dataclass(slots=True)
class DeviceTwin:
    """Registry view of a device: connection state plus reported/desired properties."""

    device_id: str
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    reported: Dict[str, Any] = field(default_factory=dict)
    desired: Dict[str, Any] = field(default_factory=dict)
    etag: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return self.connection_state == ConnectionState.CONNECTED

    @property
    def reported_line_id(self) -> Optional[str]:
        value = self.reported.get("lineId")
        return str(value) if value is not None else None


@dataclass(slots=True)
class DirectMethodResponse:
    """Outcome of a synchronous remote method call on a device."""

    status: int
    payload: Any = None


@dataclass(frozen=True, slots=True)
class DeviceMetadata:
    """Directory entry for a single device."""

    device_id: str
    device_type: DeviceType
    line_id: Optional[str] = None
    line_name: Optional[str] = None
    connection_status: Optional[str] = None
    health: Optional[str] = None
    state: Optional[str] = None
    is_fallback: bool = False
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
