"""
Typed action parameters.

Each decision, coordination action and command carries exactly one of the
variants below. On the wire every variant flattens to the PascalCase
key/value object devices and downstream agents already understand.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True, slots=True)
class ActionParameters:
    """Base variant; carries no values."""

    def to_wire(self) -> Dict[str, Any]:
        return {}


NO_PARAMETERS = ActionParameters()


@dataclass(frozen=True, slots=True)
class LoadReduction(ActionParameters):
    target_reduction: int

    def to_wire(self) -> Dict[str, Any]:
        return {"TargetReduction": self.target_reduction}


@dataclass(frozen=True, slots=True)
class Compensation(ActionParameters):
    compensation_rate: int

    def to_wire(self) -> Dict[str, Any]:
        return {"CompensationRate": self.compensation_rate}


@dataclass(frozen=True, slots=True)
class ProductionBoost(ActionParameters):
    boost_target: int

    def to_wire(self) -> Dict[str, Any]:
        return {"BoostTarget": self.boost_target}


@dataclass(frozen=True, slots=True)
class BalanceTarget(ActionParameters):
    balance_target: int

    def to_wire(self) -> Dict[str, Any]:
        return {"BalanceTarget": self.balance_target}


@dataclass(frozen=True, slots=True)
class PressureTarget(ActionParameters):
    target_pressure: float

    def to_wire(self) -> Dict[str, Any]:
        return {"TargetPressure": self.target_pressure}


@dataclass(frozen=True, slots=True)
class SpeedTarget(ActionParameters):
    target_speed: float

    def to_wire(self) -> Dict[str, Any]:
        return {"TargetSpeed": self.target_speed}


@dataclass(frozen=True, slots=True)
class PassRateTarget(ActionParameters):
    target_pass_rate: float

    def to_wire(self) -> Dict[str, Any]:
        return {"TargetPassRate": self.target_pass_rate}


@dataclass(frozen=True, slots=True)
class CompressorReadings(ActionParameters):
    system_air_pressure: float
    output_pressure: float

    def to_wire(self) -> Dict[str, Any]:
        return {
            "SystemAirPressure": self.system_air_pressure,
            "OutputPressure": self.output_pressure,
        }


@dataclass(frozen=True, slots=True)
class CriticalError(ActionParameters):
    error_code: int
    error_priority: int = 0

    def to_wire(self) -> Dict[str, Any]:
        return {"ErrorCode": self.error_code, "ErrorPriority": self.error_priority}


@dataclass(frozen=True, slots=True)
class LineErrorPattern(ActionParameters):
    error_count: int
    max_error_code: int
    avg_temperature: float = 0.0

    def to_wire(self) -> Dict[str, Any]:
        return {
            "ErrorCount": self.error_count,
            "MaxErrorCode": self.max_error_code,
            "AvgTemperature": self.avg_temperature,
        }


@dataclass(frozen=True, slots=True)
class RateTarget(ActionParameters):
    target_rate: int

    def to_wire(self) -> Dict[str, Any]:
        return {"TargetRate": self.target_rate}


@dataclass(frozen=True, slots=True)
class LineStop(ActionParameters):
    line_id: str
    timestamp: datetime

    def to_wire(self) -> Dict[str, Any]:
        return {"LineId": self.line_id, "Timestamp": self.timestamp.isoformat()}


class OptimizeMode(str, Enum):
    REDUCE_LOAD = "ReduceLoad"
    COMPENSATE = "Compensate"


@dataclass(frozen=True, slots=True)
class OptimizeRequest(ActionParameters):
    """Line optimisation request focused on one overheating or failing device."""

    mode: OptimizeMode
    focus_device: str
    temperature: float = 0.0
    error_count: int = 0

    def to_wire(self) -> Dict[str, Any]:
        if self.mode == OptimizeMode.REDUCE_LOAD:
            return {
                "Action": self.mode.value,
                "OverheatingDevice": self.focus_device,
                "Temperature": self.temperature,
            }
        return {
            "Action": self.mode.value,
            "ProblematicDevice": self.focus_device,
            "ErrorCount": self.error_count,
        }


@dataclass(frozen=True, slots=True)
class BalanceRequest(ActionParameters):
    slow_device: str
    current_rate: int = 0
    target_rate: int = 60

    def to_wire(self) -> Dict[str, Any]:
        return {
            "SlowDevice": self.slow_device,
            "CurrentRate": self.current_rate,
            "TargetRate": self.target_rate,
        }


@dataclass(frozen=True, slots=True)
class OperatorParameters(ActionParameters):
    """Opaque key/value pairs supplied by an operator or an upstream agent."""

    values: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "OperatorParameters":
        return cls(values=tuple(values.items()))

    def to_wire(self) -> Dict[str, Any]:
        return dict(self.values)
