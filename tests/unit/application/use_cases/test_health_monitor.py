from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import List

import pytest

from iiot_coordinator.application.use_cases.health_monitor import HealthStateMonitor
from iiot_coordinator.domain.entities.device_health import (
    HealthState,
    StatusChangeRecord,
    TelemetrySnapshot,
)
from iiot_coordinator.domain.repositories.status_change_repository import (
    IStatusChangeRepository,
    ITelemetryRepository,
)


class _StubTelemetry(ITelemetryRepository):
    def __init__(self) -> None:
        self.snapshots: List[TelemetrySnapshot] = []
        self.error: Exception | None = None

    async def get_latest_snapshots(self) -> List[TelemetrySnapshot]:
        if self.error:
            raise self.error
        return list(self.snapshots)


class _StubStatusChanges(IStatusChangeRepository):
    def __init__(self) -> None:
        self.records: List[StatusChangeRecord] = []
        self.error: Exception | None = None

    async def save(self, record: StatusChangeRecord) -> StatusChangeRecord:
        if self.error:
            raise self.error
        self.records.append(record)
        return record


@pytest.fixture()
def telemetry() -> _StubTelemetry:
    return _StubTelemetry()


@pytest.fixture()
def status_changes() -> _StubStatusChanges:
    return _StubStatusChanges()


@pytest.fixture()
def monitor(telemetry, status_changes, dummy_now) -> HealthStateMonitor:
    return HealthStateMonitor(telemetry, status_changes, clock=lambda: dummy_now)


def _snapshot(now, device_id="Press1", age=timedelta(minutes=1), **fields):
    return TelemetrySnapshot(
        device_id=device_id,
        window_end=now - age,
        line_id="Line1",
        device_type="Press",
        **fields,
    )


@pytest.mark.asyncio
async def test_first_observation_is_recorded(monitor, telemetry, status_changes, dummy_now):
    telemetry.snapshots = [_snapshot(dummy_now, avg_temperature=70.0)]

    written = await monitor.run_cycle()

    assert len(written) == 1
    record = status_changes.records[0]
    assert record.is_initial
    assert record.new_status is HealthState.ONLINE
    assert record.timestamp == dummy_now
    assert record.line_id == "Line1"
    assert monitor.known_states == {"Press1": HealthState.ONLINE}


@pytest.mark.asyncio
async def test_unchanged_state_writes_nothing(monitor, telemetry, status_changes, dummy_now):
    telemetry.snapshots = [_snapshot(dummy_now)]

    await monitor.run_cycle()
    second = await monitor.run_cycle()

    assert second == []
    assert len(status_changes.records) == 1


@pytest.mark.asyncio
async def test_transitions_are_recorded(monitor, telemetry, status_changes, dummy_now):
    telemetry.snapshots = [_snapshot(dummy_now)]
    await monitor.run_cycle()

    telemetry.snapshots = [_snapshot(dummy_now, current_error_code=17)]
    await monitor.run_cycle()

    later = dummy_now + timedelta(minutes=10)
    await monitor.run_cycle(now=later)

    transitions = [(r.old_status, r.new_status) for r in status_changes.records]
    assert transitions == [
        (None, HealthState.ONLINE),
        (HealthState.ONLINE, HealthState.ERROR),
        (HealthState.ERROR, HealthState.OFFLINE),
    ]
    assert status_changes.records[1].reason == "Device error code 17"
    assert status_changes.records[2].reason == "No telemetry for 11 minutes"


@pytest.mark.asyncio
async def test_telemetry_read_failure_skips_cycle(monitor, telemetry, status_changes):
    telemetry.error = RuntimeError("mongo unavailable")

    assert await monitor.run_cycle() == []
    assert status_changes.records == []
    assert monitor.known_states == {}


@pytest.mark.asyncio
async def test_failed_write_is_retried_next_cycle(
    monitor, telemetry, status_changes, dummy_now
):
    telemetry.snapshots = [
        _snapshot(dummy_now, device_id="Press1"),
        _snapshot(dummy_now, device_id="Conveyor1", avg_temperature=85.0),
    ]
    status_changes.error = RuntimeError("write not acknowledged")

    assert await monitor.run_cycle() == []
    assert monitor.known_states == {}

    status_changes.error = None
    written = await monitor.run_cycle()

    assert {r.device_id: r.new_status for r in written} == {
        "Press1": HealthState.ONLINE,
        "Conveyor1": HealthState.WARNING,
    }


@pytest.mark.asyncio
async def test_overlapping_cycle_is_skipped(status_changes, dummy_now):
    release = asyncio.Event()

    class _SlowTelemetry(_StubTelemetry):
        async def get_latest_snapshots(self):
            await release.wait()
            return [_snapshot(dummy_now)]

    monitor = HealthStateMonitor(
        _SlowTelemetry(), status_changes, clock=lambda: dummy_now
    )

    first = asyncio.create_task(monitor.run_cycle())
    await asyncio.sleep(0)
    assert await monitor.run_cycle() == []

    release.set()
    assert len(await first) == 1
