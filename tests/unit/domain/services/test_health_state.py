from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from iiot_coordinator.domain.entities.device_health import (
    HealthState,
    TelemetrySnapshot,
)
from iiot_coordinator.domain.services.health_state import (
    HealthThresholds,
    derive_health_state,
    describe_health_state,
)

NOW = datetime(2025, 10, 4, 12, 0, tzinfo=timezone.utc)


def _snapshot(age: timedelta = timedelta(minutes=1), **fields) -> TelemetrySnapshot:
    return TelemetrySnapshot(device_id="Press1", window_end=NOW - age, **fields)


@pytest.mark.parametrize(
    ("snapshot", "expected"),
    [
        (_snapshot(), HealthState.ONLINE),
        (_snapshot(avg_temperature=80.0), HealthState.ONLINE),
        (_snapshot(avg_temperature=80.5), HealthState.WARNING),
        (_snapshot(current_error_code=7, avg_temperature=99.0), HealthState.ERROR),
        (
            _snapshot(age=timedelta(minutes=6), current_error_code=7),
            HealthState.OFFLINE,
        ),
        (_snapshot(age=timedelta(minutes=5)), HealthState.ONLINE),
    ],
)
def test_derive_health_state(snapshot, expected) -> None:
    assert derive_health_state(snapshot, NOW) is expected


def test_custom_thresholds() -> None:
    thresholds = HealthThresholds(offline_after=timedelta(minutes=1), warning_temperature=60)

    assert (
        derive_health_state(_snapshot(age=timedelta(minutes=2)), NOW, thresholds)
        is HealthState.OFFLINE
    )
    assert (
        derive_health_state(_snapshot(avg_temperature=65.0), NOW, thresholds)
        is HealthState.WARNING
    )


def test_describe_health_state() -> None:
    stale = _snapshot(age=timedelta(minutes=7, seconds=30))
    assert (
        describe_health_state(HealthState.OFFLINE, stale, NOW)
        == "No telemetry for 7 minutes"
    )
    assert (
        describe_health_state(HealthState.ERROR, _snapshot(current_error_code=12), NOW)
        == "Device error code 12"
    )
    assert (
        describe_health_state(HealthState.WARNING, _snapshot(avg_temperature=84.24), NOW)
        == "High temperature: 84.2°C"
    )
    assert describe_health_state(HealthState.ONLINE, _snapshot(), NOW).startswith(
        "Device recovered"
    )
