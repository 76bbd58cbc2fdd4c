from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from iiot_coordinator.application.dtos.alert_dto import (
    CriticalErrorAlertDTO,
    DeviceAlertDTO,
    LineErrorAlertDTO,
)
from iiot_coordinator.domain.entities.alerts import AlertType
from iiot_coordinator.domain.entities.device import DeviceType


def test_device_alert_from_pascal_case_payload() -> None:
    dto = DeviceAlertDTO.model_validate(
        {
            "DeviceId": "Press1",
            "LineId": "Line1",
            "DeviceType": 0,
            "AlertType": "temperature",
            "Temperature": 97.0,
            "Priority": 4,
            "Timestamp": "2025-10-04T12:00:00Z",
            "Unexpected": "ignored",
        }
    )

    alert = dto.to_domain(alert_id="msg-1")

    assert alert.device_id == "Press1"
    assert alert.device_type is DeviceType.PRESS
    assert alert.alert_type is AlertType.TEMPERATURE
    assert alert.temperature == 97.0
    assert alert.alert_id == "msg-1"
    assert alert.timestamp == datetime(2025, 10, 4, 12, 0, tzinfo=timezone.utc)


def test_device_alert_defaults_for_missing_fields() -> None:
    alert = DeviceAlertDTO.model_validate({"AlertType": "Bogus"}).to_domain()

    assert alert.device_id == ""
    assert alert.alert_type is None
    assert alert.device_type is None
    assert alert.pressure is None


def test_device_alert_rejects_malformed_numbers() -> None:
    with pytest.raises(ValidationError):
        DeviceAlertDTO.model_validate({"DeviceId": "Press1", "Temperature": "hot"})


def test_critical_alert_flags_become_booleans() -> None:
    alert = CriticalErrorAlertDTO.model_validate(
        {
            "DeviceId": "Conv2",
            "LineId": "Line1",
            "DeviceError": 42,
            "HasSensorFailure": 1,
            "ErrorPriority": 3,
        }
    ).to_domain()

    assert alert.has_sensor_failure is True
    assert alert.has_emergency_stop is False
    assert alert.device_error == 42
    assert alert.error_priority == 3


def test_line_alert_from_payload() -> None:
    alert = LineErrorAlertDTO.model_validate(
        {
            "LineId": "Line1",
            "LineName": "Primary Assembly Line",
            "ErrorCount": 6,
            "MaxErrorCode": 909,
            "AvgTemperature": 72.4,
        }
    ).to_domain(alert_id="msg-9")

    assert alert.line_id == "Line1"
    assert alert.error_count == 6
    assert alert.max_error_code == 909
    assert alert.line_name == "Primary Assembly Line"
    assert alert.alert_id == "msg-9"
