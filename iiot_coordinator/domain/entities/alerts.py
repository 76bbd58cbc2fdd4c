"""
Domain Entities - Alerts

Immutable alert events delivered by the transport. They are built from the
wire payloads by the application DTOs and consumed once per handler call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from .device import DeviceType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertType(str, Enum):
    """Category tag of a device alert."""

    TEMPERATURE = "Temperature"
    ERROR = "Error"
    PRODUCTION = "Production"
    DEVICE_SPECIFIC = "DeviceSpecific"
    CRITICAL = "Critical"
    LINE_ERROR = "LineError"


@dataclass(frozen=True, slots=True)
class DeviceAlert:
    """Threshold alert raised by stream analytics for a single device."""

    device_id: str
    line_id: str
    alert_type: Optional[AlertType]
    device_type: Optional[DeviceType] = None
    priority: int = 1
    workorder_id: Optional[str] = None
    temperature: float = 0.0
    error_count: int = 0
    production_rate: int = 0
    status: Optional[str] = None
    # Device-specific readings
    pressure: Optional[float] = None
    speed: Optional[float] = None
    good_count: Optional[int] = None
    bad_count: Optional[int] = None
    pass_rate: Optional[float] = None
    output_pressure: Optional[float] = None
    system_air_pressure: Optional[float] = None
    alert_id: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True, slots=True)
class CriticalErrorAlert:
    """Immediate device error carrying the decoded error flags."""

    device_id: str
    line_id: str
    device_error: int
    has_emergency_stop: bool = False
    has_power_failure: bool = False
    has_sensor_failure: bool = False
    has_unknown_error: bool = False
    error_priority: int = 0
    alert_id: Optional[str] = None
    event_time: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True, slots=True)
class LineErrorAlert:
    """Windowed aggregation of errors observed on a whole line."""

    line_id: str
    error_count: int
    max_error_code: int = 0
    avg_temperature: float = 0.0
    line_name: Optional[str] = None
    priority: int = 1
    alert_id: Optional[str] = None
    alert_time: datetime = field(default_factory=_utcnow)


Alert = Union[DeviceAlert, CriticalErrorAlert, LineErrorAlert]
