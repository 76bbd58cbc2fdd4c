"""
Command DTOs - Application Layer

Wire models for the ``device-commands`` and ``line-coordination`` channels
and the request/response bodies of the operator command endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field

from iiot_coordinator.application.dtos.alert_dto import WIRE_MODEL_CONFIG
from iiot_coordinator.domain.entities.commands import (
    Command,
    CommandName,
    LineActionKind,
    LineCoordinationAction,
)
from iiot_coordinator.domain.entities.parameters import (
    NO_PARAMETERS,
    ActionParameters,
    BalanceRequest,
    OperatorParameters,
    OptimizeMode,
    OptimizeRequest,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    return int(float(value))


def _as_float(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _operator_parameters(values: Mapping[str, Any]) -> ActionParameters:
    return OperatorParameters.from_mapping(values) if values else NO_PARAMETERS


class DeviceCommandDTO(BaseModel):
    """``DeviceCommand`` message as published on ``device-commands``."""

    message_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=_utcnow)
    sender_id: str = Field(default="", description="Issuing subsystem")
    message_type: str = Field(default="DeviceCommand")
    priority: int = Field(default=1, description="Priority 1 (low) to 5 (critical)")
    device_id: str = Field(default="", description="Target device")
    device_type: Optional[Union[int, str]] = Field(default=None)
    line_id: Optional[str] = Field(default=None, description="Owning line")
    command: str = Field(default="", description="Command name")
    parameters: Dict[str, Any] = Field(default_factory=dict)
    requires_ack: bool = Field(default=True)

    model_config = {
        **WIRE_MODEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "MessageId": "5b0e6a52-0c55-4a0e-8f8f-0d5d1c1f4a51",
                "Timestamp": "2025-10-04T12:00:00Z",
                "SenderId": "LineOptimizationAgent",
                "MessageType": "DeviceCommand",
                "Priority": 1,
                "DeviceId": "Press1",
                "Command": "AdjustProductionRate",
                "Parameters": {"TargetRate": 40, "Reason": "Reducing load"},
                "RequiresAck": True,
            }
        },
    }

    @classmethod
    def from_domain(cls, command: Command) -> "DeviceCommandDTO":
        return cls(
            message_id=command.message_id,
            timestamp=command.timestamp,
            sender_id=command.sender_id,
            priority=command.priority,
            device_id=command.device_id,
            line_id=command.line_id,
            command=command.command_name.value,
            parameters=command.payload(),
            requires_ack=command.requires_ack,
        )

    def to_domain(self) -> Command:
        """
        Raises:
            ValueError: If the command name is outside the device vocabulary
        """
        values = dict(self.parameters)
        reason = values.pop("Reason", None)
        return Command(
            device_id=self.device_id,
            command_name=CommandName(self.command),
            sender_id=self.sender_id,
            reason=str(reason) if reason is not None else "",
            parameters=_operator_parameters(values),
            priority=self.priority,
            requires_ack=self.requires_ack,
            line_id=self.line_id,
            message_id=self.message_id,
            timestamp=self.timestamp,
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LineCoordinationDTO(BaseModel):
    """``LineCoordination`` message as published on ``line-coordination``."""

    message_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=_utcnow)
    sender_id: str = Field(default="", description="Issuing subsystem")
    message_type: str = Field(default="LineCoordination")
    priority: int = Field(default=1)
    line_id: str = Field(default="", description="Target line")
    action: str = Field(default="", description="EmergencyStop, Optimize, Balance or Reset")
    affected_devices: List[str] = Field(default_factory=list)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    reason: str = Field(default="")

    model_config = {
        **WIRE_MODEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "LineId": "Line1",
                "Action": "Optimize",
                "AffectedDevices": ["Press1", "Conveyor1", "QualityStation1"],
                "Parameters": {
                    "Action": "ReduceLoad",
                    "OverheatingDevice": "Press1",
                    "Temperature": 92.5,
                },
                "Reason": "High temperature: 92.5°C",
                "Priority": 3,
            }
        },
    }

    @classmethod
    def from_domain(
        cls, action: LineCoordinationAction, sender_id: str = ""
    ) -> "LineCoordinationDTO":
        return cls(
            message_id=action.message_id,
            timestamp=action.timestamp,
            sender_id=sender_id,
            priority=action.priority,
            line_id=action.line_id,
            action=action.kind.value if action.kind else (action.raw_kind or ""),
            affected_devices=list(action.affected_devices),
            parameters=action.parameters.to_wire(),
            reason=action.reason,
        )

    def to_domain(self) -> LineCoordinationAction:
        kind = _parse_kind(self.action)
        return LineCoordinationAction(
            line_id=self.line_id,
            kind=kind,
            affected_devices=tuple(self.affected_devices),
            parameters=_decode_line_parameters(kind, self.parameters),
            reason=self.reason,
            priority=self.priority,
            raw_kind=self.action,
            message_id=self.message_id,
            timestamp=self.timestamp,
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _parse_kind(value: str) -> Optional[LineActionKind]:
    try:
        return LineActionKind(value)
    except ValueError:
        return None


def _decode_line_parameters(
    kind: Optional[LineActionKind], values: Mapping[str, Any]
) -> ActionParameters:
    if kind == LineActionKind.OPTIMIZE:
        mode = values.get("Action")
        if mode == OptimizeMode.REDUCE_LOAD.value:
            return OptimizeRequest(
                mode=OptimizeMode.REDUCE_LOAD,
                focus_device=str(values.get("OverheatingDevice") or ""),
                temperature=_as_float(values.get("Temperature"), 0.0),
            )
        if mode == OptimizeMode.COMPENSATE.value:
            return OptimizeRequest(
                mode=OptimizeMode.COMPENSATE,
                focus_device=str(values.get("ProblematicDevice") or ""),
                error_count=_as_int(values.get("ErrorCount"), 0),
            )
    elif kind == LineActionKind.BALANCE:
        return BalanceRequest(
            slow_device=str(values.get("SlowDevice") or ""),
            current_rate=_as_int(values.get("CurrentRate"), 0),
            target_rate=_as_int(values.get("TargetRate"), 60),
        )
    return _operator_parameters(values)


class DeviceCommandRequestDTO(BaseModel):
    """Operator command submitted through the HTTP API."""

    command: Optional[str] = Field(default=None, description="Command name")
    parameters: Dict[str, Any] = Field(
        default_factory=dict, description="Command parameters"
    )
    priority: Optional[int] = Field(
        default=None, ge=1, le=5, description="Priority 1 (low) to 5 (critical)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "command": "AdjustProductionRate",
                "parameters": {"TargetRate": 60},
                "priority": 2,
            }
        }
    }


class DeviceCommandQueuedDTO(BaseModel):
    """Acknowledgement returned once an operator command has been queued."""

    success: bool = Field(default=True)
    message_id: str = Field(description="Message ID of the queued command")
    device_id: str = Field(description="Target device")
    command: str = Field(description="Command name")
    status: str = Field(default="Command queued for execution")


class TwinUpdateRequestDTO(BaseModel):
    """Desired-property update for a device twin."""

    property_name: str = Field(min_length=1, description="Desired property name")
    property_value: Union[bool, int, float, str, None] = Field(
        description="New property value"
    )

    model_config = {
        "json_schema_extra": {
            "example": {"property_name": "targetProductionRate", "property_value": 60}
        }
    }


class TwinUpdateResponseDTO(BaseModel):
    success: bool = Field(default=True)
    message: str = Field(description="Summary of the update")
