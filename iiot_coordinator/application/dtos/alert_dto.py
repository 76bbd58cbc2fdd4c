"""
Alert DTOs - Application Layer

Wire models for the alert messages delivered on the ``device-alerts``,
``critical-alerts`` and ``line-alerts`` channels. Payloads use PascalCase
keys; missing fields fall back to defaults so that the use cases can reject
incomplete alerts with a warning instead of failing the delivery.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_pascal

from iiot_coordinator.domain.entities.alerts import (
    AlertType,
    CriticalErrorAlert,
    DeviceAlert,
    LineErrorAlert,
)
from iiot_coordinator.domain.entities.device import DeviceType

WIRE_MODEL_CONFIG = {
    "alias_generator": to_pascal,
    "populate_by_name": True,
    "extra": "ignore",
}


def _parse_alert_type(value: Optional[str]) -> Optional[AlertType]:
    if not value:
        return None
    for member in AlertType:
        if member.value.lower() == value.strip().lower():
            return member
    return None


class DeviceAlertDTO(BaseModel):
    """Threshold alert for a single device."""

    message_id: Optional[str] = Field(default=None, description="Message ID")
    timestamp: Optional[datetime] = Field(default=None, description="Alert time")
    sender_id: Optional[str] = Field(default=None, description="Emitting agent")
    priority: int = Field(default=1, description="Priority 1 (low) to 5 (critical)")
    device_id: str = Field(default="", description="Device identifier")
    line_id: str = Field(default="", description="Owning line identifier")
    device_type: Optional[Union[int, str]] = Field(
        default=None, description="Device type name or legacy integer code"
    )
    workorder_id: Optional[str] = Field(default=None, description="Work order")
    temperature: float = Field(default=0.0, description="Temperature in °C")
    error_count: int = Field(default=0, description="Errors in the window")
    production_rate: int = Field(default=0, description="Units per hour")
    alert_type: Optional[str] = Field(
        default=None, description="Temperature, Error, Production or DeviceSpecific"
    )
    status: Optional[str] = Field(default=None, description="Production status")
    pressure: Optional[float] = Field(default=None, description="Press pressure")
    speed: Optional[float] = Field(default=None, description="Conveyor speed")
    good_count: Optional[int] = Field(default=None, description="Good parts")
    bad_count: Optional[int] = Field(default=None, description="Rejected parts")
    pass_rate: Optional[float] = Field(default=None, description="Pass rate in %")
    output_pressure: Optional[float] = Field(
        default=None, description="Compressor output pressure"
    )
    system_air_pressure: Optional[float] = Field(
        default=None, description="Plant air pressure"
    )

    model_config = {
        **WIRE_MODEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "DeviceId": "Press1",
                "LineId": "Line1",
                "DeviceType": "Press",
                "AlertType": "Temperature",
                "Temperature": 97.0,
                "ErrorCount": 0,
                "ProductionRate": 55,
                "Priority": 4,
            }
        },
    }

    def to_domain(self, alert_id: Optional[str] = None) -> DeviceAlert:
        extra: dict[str, Any] = {}
        if self.timestamp is not None:
            extra["timestamp"] = self.timestamp
        return DeviceAlert(
            device_id=self.device_id,
            line_id=self.line_id,
            alert_type=_parse_alert_type(self.alert_type),
            device_type=DeviceType.parse(self.device_type),
            priority=self.priority,
            workorder_id=self.workorder_id,
            temperature=self.temperature,
            error_count=self.error_count,
            production_rate=self.production_rate,
            status=self.status,
            pressure=self.pressure,
            speed=self.speed,
            good_count=self.good_count,
            bad_count=self.bad_count,
            pass_rate=self.pass_rate,
            output_pressure=self.output_pressure,
            system_air_pressure=self.system_air_pressure,
            alert_id=alert_id,
            **extra,
        )


class CriticalErrorAlertDTO(BaseModel):
    """Immediate device error decoded by stream analytics."""

    device_id: str = Field(default="", description="Device identifier")
    line_id: str = Field(default="", description="Owning line identifier")
    device_error: int = Field(default=0, description="Raw device error code")
    has_emergency_stop: int = Field(default=0, description="Emergency-stop flag")
    has_power_failure: int = Field(default=0, description="Power-failure flag")
    has_sensor_failure: int = Field(default=0, description="Sensor-failure flag")
    has_unknown_error: int = Field(default=0, description="Unknown-error flag")
    error_priority: int = Field(default=0, description="Decoded error priority")
    message_type: Optional[str] = Field(default=None, description="Message type")
    event_time: Optional[datetime] = Field(default=None, description="Event time")

    model_config = {
        **WIRE_MODEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "DeviceId": "Conv2",
                "LineId": "Line1",
                "DeviceError": 42,
                "HasEmergencyStop": 0,
                "HasPowerFailure": 0,
                "HasSensorFailure": 1,
                "HasUnknownError": 0,
                "ErrorPriority": 3,
            }
        },
    }

    def to_domain(self, alert_id: Optional[str] = None) -> CriticalErrorAlert:
        extra: dict[str, Any] = {}
        if self.event_time is not None:
            extra["event_time"] = self.event_time
        return CriticalErrorAlert(
            device_id=self.device_id,
            line_id=self.line_id,
            device_error=self.device_error,
            has_emergency_stop=bool(self.has_emergency_stop),
            has_power_failure=bool(self.has_power_failure),
            has_sensor_failure=bool(self.has_sensor_failure),
            has_unknown_error=bool(self.has_unknown_error),
            error_priority=self.error_priority,
            alert_id=alert_id,
            **extra,
        )


class LineErrorAlertDTO(BaseModel):
    """Windowed error aggregation for a whole line."""

    line_id: str = Field(default="", description="Line identifier")
    line_name: Optional[str] = Field(default=None, description="Line display name")
    alert_time: Optional[datetime] = Field(default=None, description="Window end")
    error_count: int = Field(default=0, description="Errors in the window")
    max_error_code: int = Field(default=0, description="Highest error code seen")
    avg_temperature: float = Field(default=0.0, description="Average temperature")
    priority: int = Field(default=1, description="Priority 1 (low) to 5 (critical)")
    message_type: Optional[str] = Field(default=None, description="Message type")

    model_config = {
        **WIRE_MODEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "LineId": "Line1",
                "LineName": "Primary Assembly Line",
                "ErrorCount": 6,
                "MaxErrorCode": 909,
                "AvgTemperature": 72.4,
                "Priority": 4,
            }
        },
    }

    def to_domain(self, alert_id: Optional[str] = None) -> LineErrorAlert:
        extra: dict[str, Any] = {}
        if self.alert_time is not None:
            extra["alert_time"] = self.alert_time
        return LineErrorAlert(
            line_id=self.line_id,
            error_count=self.error_count,
            max_error_code=self.max_error_code,
            avg_temperature=self.avg_temperature,
            line_name=self.line_name,
            priority=self.priority,
            alert_id=alert_id,
            **extra,
        )
