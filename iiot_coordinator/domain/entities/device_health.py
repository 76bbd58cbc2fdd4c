"""Domain entities for derived device health states and their audit trail."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

STATUS_CHANGE_DOCUMENT_TYPE = "status-change"
STATUS_CHANGE_TTL_SECONDS = 30 * 24 * 60 * 60


class HealthState(str, Enum):
    ONLINE = "online"
    WARNING = "warning"
    ERROR = "error"
    OFFLINE = "offline"


@dataclass(frozen=True, slots=True)
class TelemetrySnapshot:
    """Latest windowed telemetry rollup for one device."""

    device_id: str
    window_end: datetime
    line_id: Optional[str] = None
    device_type: Optional[str] = None
    avg_temperature: float = 0.0
    avg_production_rate: float = 0.0
    availability_percentage: float = 0.0
    current_error_code: int = 0


@dataclass(frozen=True, slots=True)
class StatusChangeRecord:
    """Audit record written whenever a device changes health state."""

    device_id: str
    new_status: HealthState
    timestamp: datetime
    reason: str
    old_status: Optional[HealthState] = None
    line_id: Optional[str] = None
    device_type: Optional[str] = None
    temperature: float = 0.0
    error_code: int = 0
    availability_percentage: float = 0.0
    ttl: int = STATUS_CHANGE_TTL_SECONDS
    id: str = field(default_factory=lambda: str(uuid4()))
    document_type: str = STATUS_CHANGE_DOCUMENT_TYPE

    @property
    def is_initial(self) -> bool:
        return self.old_status is None
