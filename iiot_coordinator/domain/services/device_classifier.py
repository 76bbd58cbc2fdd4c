"""Name-based device type inference and line identifier helpers."""

from __future__ import annotations

import re
from typing import Any, Optional, Tuple

from iiot_coordinator.domain.entities.device import DeviceType
from iiot_coordinator.domain.entities.errors import UnknownDeviceTypeError

# Checked in order; the first substring contained in the lowered id wins.
# "compressor" contains "press", so it must come first.
_NAME_PATTERNS: Tuple[Tuple[str, DeviceType], ...] = (
    ("compressor", DeviceType.COMPRESSOR),
    ("press", DeviceType.PRESS),
    ("conveyor", DeviceType.CONVEYOR),
    ("quality", DeviceType.QUALITY_STATION),
)

_LINE_NUMBER = re.compile(r"(\d+)\s*$")


def infer_device_type(device_id: str) -> Optional[DeviceType]:
    """Return the device type implied by the identifier, if any."""
    lowered = device_id.lower()
    for pattern, device_type in _NAME_PATTERNS:
        if pattern in lowered:
            return device_type
    return None


def classify_device_type(device_id: str, reported_type: Any = None) -> DeviceType:
    """
    Resolve a device type from its identifier, falling back to the type the
    device reports about itself.

    Raises:
        UnknownDeviceTypeError: If neither source identifies the type
    """
    device_type = infer_device_type(device_id) or DeviceType.parse(reported_type)
    if device_type is None:
        raise UnknownDeviceTypeError(
            device_id, details={"reported_type": reported_type}
        )
    return device_type


def extract_line_number(line_id: str) -> Optional[str]:
    """Trailing numeric suffix of a line id ("ProductionLine2" -> "2")."""
    match = _LINE_NUMBER.search(line_id or "")
    return match.group(1) if match else None


def canonical_line_devices(line_number: str) -> Tuple[str, ...]:
    """Canonical device names of a standard four-station line."""
    return (
        f"Press{line_number}",
        f"Conveyor{line_number}",
        f"QualityStation{line_number}",
        f"Compressor{line_number}",
    )
