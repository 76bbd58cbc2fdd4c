"""
Health-State Monitor - Application Layer

Derives a health state for every device from its latest telemetry rollup
and writes an audit record whenever the state changes.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from iiot_coordinator.domain.entities.device_health import (
    HealthState,
    StatusChangeRecord,
    TelemetrySnapshot,
)
from iiot_coordinator.domain.repositories.status_change_repository import (
    IStatusChangeRepository,
    ITelemetryRepository,
)
from iiot_coordinator.domain.services.health_state import (
    HealthThresholds,
    derive_health_state,
    describe_health_state,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)


class HealthStateMonitor:
    """
    Periodic detector of device health-state transitions.

    The previous-state map lives in memory and is owned by this instance;
    cycles are serialised and an overlapping call returns immediately.
    """

    def __init__(
        self,
        telemetry_repository: ITelemetryRepository,
        status_change_repository: IStatusChangeRepository,
        thresholds: Optional[HealthThresholds] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.telemetry_repository = telemetry_repository
        self.status_change_repository = status_change_repository
        self.thresholds = thresholds or HealthThresholds()
        self._clock = clock
        self._previous: Dict[str, HealthState] = {}
        self._lock = asyncio.Lock()

    @property
    def known_states(self) -> Dict[str, HealthState]:
        return dict(self._previous)

    async def run_cycle(self, now: Optional[datetime] = None) -> List[StatusChangeRecord]:
        """
        Run one detection cycle.

        Returns:
            The status change records written during this cycle
        """
        if self._lock.locked():
            logger.warning("monitor.cycle.skipped", reason="previous cycle still running")
            return []

        async with self._lock:
            now = now or self._clock()
            try:
                snapshots = await self.telemetry_repository.get_latest_snapshots()
            except Exception as e:
                logger.error("monitor.telemetry_read_failed", error=str(e), exc_info=e)
                return []

            written: List[StatusChangeRecord] = []
            for snapshot in snapshots:
                record = await self._observe(snapshot, now)
                if record is not None:
                    written.append(record)

            logger.info(
                "monitor.cycle.completed",
                devices=len(snapshots),
                changes=len(written),
            )
            return written

    async def _observe(
        self, snapshot: TelemetrySnapshot, now: datetime
    ) -> Optional[StatusChangeRecord]:
        state = derive_health_state(snapshot, now, self.thresholds)
        previous = self._previous.get(snapshot.device_id)
        if previous == state:
            return None

        record = StatusChangeRecord(
            device_id=snapshot.device_id,
            new_status=state,
            old_status=previous,
            timestamp=now,
            reason=describe_health_state(state, snapshot, now),
            line_id=snapshot.line_id,
            device_type=snapshot.device_type,
            temperature=snapshot.avg_temperature,
            error_code=snapshot.current_error_code,
            availability_percentage=snapshot.availability_percentage,
        )
        try:
            await self.status_change_repository.save(record)
        except Exception as e:
            # Leave the cache untouched so the next cycle retries the write.
            logger.error(
                "monitor.record_write_failed",
                device_id=snapshot.device_id,
                new_status=state.value,
                error=str(e),
                exc_info=e,
            )
            return None

        self._previous[snapshot.device_id] = state
        logger.info(
            "monitor.status_changed",
            device_id=snapshot.device_id,
            old_status=previous.value if previous else None,
            new_status=state.value,
            reason=record.reason,
        )
        return record
