"""Derivation of device health states from telemetry snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from iiot_coordinator.domain.entities.device_health import (
    HealthState,
    TelemetrySnapshot,
)


@dataclass(frozen=True)
class HealthThresholds:
    offline_after: timedelta = timedelta(minutes=5)
    warning_temperature: float = 80.0


def derive_health_state(
    snapshot: TelemetrySnapshot,
    now: datetime,
    thresholds: HealthThresholds = HealthThresholds(),
) -> HealthState:
    """Stale telemetry wins over error codes, which win over temperature."""
    if now - snapshot.window_end > thresholds.offline_after:
        return HealthState.OFFLINE
    if snapshot.current_error_code != 0:
        return HealthState.ERROR
    if snapshot.avg_temperature > thresholds.warning_temperature:
        return HealthState.WARNING
    return HealthState.ONLINE


def describe_health_state(
    state: HealthState, snapshot: TelemetrySnapshot, now: datetime
) -> str:
    if state == HealthState.OFFLINE:
        minutes = int((now - snapshot.window_end).total_seconds() // 60)
        return f"No telemetry for {minutes} minutes"
    if state == HealthState.ERROR:
        return f"Device error code {snapshot.current_error_code}"
    if state == HealthState.WARNING:
        return f"High temperature: {snapshot.avg_temperature:.1f}°C"
    return "Device recovered and operating normally"
