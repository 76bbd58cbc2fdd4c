"""
Domain Entities - Decisions

Output of the decision engine: the remediation intent derived from one
alert, plus the result types of the line and plant optimisation analyses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .alerts import AlertType
from .parameters import NO_PARAMETERS, ActionParameters


class RecommendedAction(str, Enum):
    EMERGENCY_STOP = "EmergencyStop"
    REDUCE_LOAD = "ReduceLoad"
    OPTIMIZE_LOAD = "OptimizeLoad"
    STOP_AND_RESET = "StopAndReset"
    COMPENSATE = "Compensate"
    RESET = "Reset"
    INVESTIGATE_AND_BOOST = "InvestigateAndBoost"
    BALANCE = "Balance"
    QUALITY_INVESTIGATION = "QualityInvestigation"
    QUALITY_ADJUSTMENT = "QualityAdjustment"
    COMPRESSOR_MAINTENANCE = "CompressorMaintenance"
    INCREASE_COMPRESSION = "IncreaseCompression"
    REDUCE_PRESSURE = "ReducePressure"
    ADJUST_SPEED = "AdjustSpeed"
    REDUCE_SPEED = "ReduceSpeed"
    MONITOR = "Monitor"
    POWER_FAILURE_PROTOCOL = "PowerFailureProtocol"
    SENSOR_DIAGNOSTIC = "SensorDiagnostic"
    DIAGNOSTIC_SCAN = "DiagnosticScan"
    IMMEDIATE_RESET = "ImmediateReset"


class Urgency(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    Urgency.LOW: 0,
    Urgency.MEDIUM: 1,
    Urgency.HIGH: 2,
    Urgency.CRITICAL: 3,
}


@dataclass(frozen=True, slots=True)
class Decision:
    """Classified remediation intent for a single alert."""

    device_id: str
    line_id: str
    alert_type: Optional[AlertType]
    priority: int = 1
    recommended_action: Optional[RecommendedAction] = None
    urgency: Urgency = Urgency.LOW
    reason: str = ""
    affected_devices: Tuple[str, ...] = ()
    parameters: ActionParameters = NO_PARAMETERS
    alert_id: Optional[str] = None
    decision_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_action(self) -> bool:
        return self.recommended_action is not None


class DeviceRunState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True, slots=True)
class DeviceStatus:
    """Current operating figures of one device, as input to line optimisation."""

    device_id: str
    status: str = DeviceRunState.ONLINE.value
    production_rate: int = 0
    max_production_rate: int = 80
    temperature: float = 0.0
    quality_percentage: float = 95.0
    recent_error_count: int = 0

    @property
    def is_online(self) -> bool:
        return self.status == DeviceRunState.ONLINE.value

    @property
    def effective_rate(self) -> float:
        return self.production_rate * (self.quality_percentage / 100.0)


@dataclass(frozen=True, slots=True)
class LineStatus:
    line_id: str
    utilization: float = 0.0
    energy_consumption: float = 0.0
    last_maintenance_hours: int = 0
    devices: Tuple[DeviceStatus, ...] = ()


@dataclass(slots=True)
class LineOptimizationResult:
    line_id: str
    optimization_type: str = "Balanced"
    bottleneck_device: Optional[str] = None
    device_adjustments: Dict[str, int] = field(default_factory=dict)
    expected_throughput: float = 0.0
    optimization_time: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


@dataclass(slots=True)
class PlantOptimizationResult:
    plant_id: str = "MainPlant"
    optimization_needed: bool = False
    optimization_type: Optional[str] = None
    recommended_actions: List[str] = field(default_factory=list)
    overloaded_lines: List[str] = field(default_factory=list)
    underutilized_lines: List[str] = field(default_factory=list)
    maintenance_required: List[str] = field(default_factory=list)
    analysis_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
