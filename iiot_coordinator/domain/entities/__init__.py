"""
Domain entities.

Alerts, decisions, commands and device health records. These are plain
dataclasses with no dependency on frameworks or infrastructure.
"""

from .alerts import Alert, AlertType, CriticalErrorAlert, DeviceAlert, LineErrorAlert
from .commands import (
    Command,
    CommandName,
    InvocationOutcome,
    InvocationResult,
    LineActionKind,
    LineCoordinationAction,
    SenderId,
)
from .decision import (
    Decision,
    DeviceStatus,
    LineOptimizationResult,
    LineStatus,
    PlantOptimizationResult,
    RecommendedAction,
    Urgency,
)
from .device import (
    ConnectionState,
    DeviceMetadata,
    DeviceTwin,
    DeviceType,
    DirectMethodResponse,
)
from .device_health import HealthState, StatusChangeRecord, TelemetrySnapshot
from .errors import (
    DeviceNotFoundError,
    DeviceRegistryError,
    DomainError,
    InvalidAlertError,
    InvalidCommandError,
    UnknownDeviceTypeError,
)

__all__ = [
    "Alert",
    "AlertType",
    "Command",
    "CommandName",
    "ConnectionState",
    "CriticalErrorAlert",
    "Decision",
    "DeviceAlert",
    "DeviceMetadata",
    "DeviceNotFoundError",
    "DeviceRegistryError",
    "DeviceStatus",
    "DeviceTwin",
    "DeviceType",
    "DirectMethodResponse",
    "DomainError",
    "HealthState",
    "InvalidAlertError",
    "InvalidCommandError",
    "InvocationOutcome",
    "InvocationResult",
    "LineActionKind",
    "LineCoordinationAction",
    "LineErrorAlert",
    "LineOptimizationResult",
    "LineStatus",
    "PlantOptimizationResult",
    "RecommendedAction",
    "SenderId",
    "StatusChangeRecord",
    "TelemetrySnapshot",
    "UnknownDeviceTypeError",
    "Urgency",
]
