"""Domain entities for outbound device commands and line coordination actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from .parameters import NO_PARAMETERS, ActionParameters

MIN_PRIORITY = 1
MAX_PRIORITY = 5


class CommandName(str, Enum):
    """Closed command vocabulary understood by the device firmware."""

    EMERGENCY_STOP = "EmergencyStop"
    RESET_ERROR_STATUS = "ResetErrorStatus"
    ADJUST_PRODUCTION_RATE = "AdjustProductionRate"
    REDUCE_RATE = "ReduceRate"
    RESET = "Reset"
    ADJUST_PRESSURE = "AdjustPressure"
    ADJUST_SPEED = "AdjustSpeed"
    ADJUST_QUALITY = "AdjustQuality"
    SCHEDULE_MAINTENANCE = "ScheduleMaintenance"

    @property
    def method_name(self) -> str:
        """Direct-method name the device registers for this command."""
        return _METHOD_NAMES.get(self, self.value)


_METHOD_NAMES = {
    CommandName.EMERGENCY_STOP: "HandleEmergencyStopAsync",
    CommandName.RESET_ERROR_STATUS: "HandleResetErrorStatusAsync",
    CommandName.ADJUST_PRODUCTION_RATE: "HandleAdjustProductionRateAsync",
}


class SenderId(str, Enum):
    """Subsystem tags stamped on every command."""

    DECISION_AGENT = "DecisionAgent"
    CRITICAL_ALERT_AGENT = "CriticalAlertAgent"
    LINE_ALERT_AGENT = "LineAlertAgent"
    LINE_COORDINATION = "LineCoordinationAgent"
    LINE_OPTIMIZATION = "LineOptimizationAgent"
    LINE_BALANCING = "LineBalancingAgent"
    LINE_RESET = "LineResetAgent"
    OPERATOR_UI = "PWA-UI"


@dataclass(frozen=True, slots=True)
class Command:
    """A concrete instruction for one device."""

    device_id: str
    command_name: CommandName
    sender_id: str
    reason: str = ""
    parameters: ActionParameters = NO_PARAMETERS
    priority: int = MIN_PRIORITY
    requires_ack: bool = True
    line_id: Optional[str] = None
    message_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def payload(self) -> Dict[str, Any]:
        """Parameters as sent to the device method, reason included."""
        body = self.parameters.to_wire()
        if self.reason:
            body["Reason"] = self.reason
        return body


class InvocationOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class InvocationResult:
    """What happened when a command was sent to a device synchronously."""

    device_id: str
    method_name: str
    outcome: InvocationOutcome
    status_code: Optional[int] = None
    message: str = ""
    round_trip_ms: Optional[float] = None
    alert_id: Optional[str] = None
    reaction_ms: Optional[float] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == InvocationOutcome.SUCCEEDED


class LineActionKind(str, Enum):
    EMERGENCY_STOP = "EmergencyStop"
    OPTIMIZE = "Optimize"
    BALANCE = "Balance"
    RESET = "Reset"


@dataclass(frozen=True, slots=True)
class LineCoordinationAction:
    """Line-scoped action to be expanded into per-device commands."""

    line_id: str
    kind: Optional[LineActionKind]
    affected_devices: Tuple[str, ...] = ()
    parameters: ActionParameters = NO_PARAMETERS
    reason: str = ""
    priority: int = MIN_PRIORITY
    raw_kind: Optional[str] = None
    message_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
