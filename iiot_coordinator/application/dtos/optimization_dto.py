"""DTOs for the line and plant optimisation endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from iiot_coordinator.domain.entities.decision import (
    DeviceStatus,
    LineOptimizationResult,
    LineStatus,
    PlantOptimizationResult,
)


class DeviceStatusDTO(BaseModel):
    """Operating figures of one device, in physical line order."""

    device_id: str = Field(description="Device identifier")
    status: str = Field(default="online", description="online or offline")
    production_rate: int = Field(default=0, ge=0, description="Units per hour")
    max_production_rate: int = Field(default=80, ge=0)
    temperature: float = Field(default=0.0)
    quality_percentage: float = Field(default=95.0, ge=0, le=100)
    recent_error_count: int = Field(default=0, ge=0)

    def to_domain(self) -> DeviceStatus:
        return DeviceStatus(**self.model_dump())


class LineOptimizationRequestDTO(BaseModel):
    devices: List[DeviceStatusDTO] = Field(
        description="Devices of the line, ordered upstream to downstream"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "devices": [
                    {"device_id": "Press1", "production_rate": 60},
                    {"device_id": "Conveyor1", "production_rate": 45},
                    {"device_id": "QualityStation1", "production_rate": 70},
                ]
            }
        }
    }


class LineOptimizationResultDTO(BaseModel):
    line_id: str
    optimization_type: str
    bottleneck_device: Optional[str] = None
    device_adjustments: Dict[str, int] = Field(default_factory=dict)
    expected_throughput: float
    optimization_time: datetime

    @classmethod
    def from_domain(cls, result: LineOptimizationResult) -> "LineOptimizationResultDTO":
        return cls(
            line_id=result.line_id,
            optimization_type=result.optimization_type,
            bottleneck_device=result.bottleneck_device,
            device_adjustments=dict(result.device_adjustments),
            expected_throughput=result.expected_throughput,
            optimization_time=result.optimization_time,
        )


class LineStatusDTO(BaseModel):
    line_id: str = Field(description="Line identifier")
    utilization: float = Field(default=0.0, description="Utilisation in %")
    energy_consumption: float = Field(default=0.0, ge=0)
    last_maintenance_hours: int = Field(default=0, ge=0)

    def to_domain(self) -> LineStatus:
        return LineStatus(
            line_id=self.line_id,
            utilization=self.utilization,
            energy_consumption=self.energy_consumption,
            last_maintenance_hours=self.last_maintenance_hours,
        )


class PlantAnalysisRequestDTO(BaseModel):
    lines: List[LineStatusDTO] = Field(description="Current status of every line")


class PlantOptimizationResultDTO(BaseModel):
    plant_id: str
    optimization_needed: bool
    optimization_type: Optional[str] = None
    recommended_actions: List[str] = Field(default_factory=list)
    overloaded_lines: List[str] = Field(default_factory=list)
    underutilized_lines: List[str] = Field(default_factory=list)
    maintenance_required: List[str] = Field(default_factory=list)
    analysis_time: datetime

    @classmethod
    def from_domain(
        cls, result: PlantOptimizationResult
    ) -> "PlantOptimizationResultDTO":
        return cls(
            plant_id=result.plant_id,
            optimization_needed=result.optimization_needed,
            optimization_type=result.optimization_type,
            recommended_actions=list(result.recommended_actions),
            overloaded_lines=list(result.overloaded_lines),
            underutilized_lines=list(result.underutilized_lines),
            maintenance_required=list(result.maintenance_required),
            analysis_time=result.analysis_time,
        )
