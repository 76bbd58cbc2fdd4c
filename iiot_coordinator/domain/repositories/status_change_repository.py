"""
Status Change Repository Interface

Abstracts where device status-change audit records are written and where the
latest telemetry rollups used to derive health states are read from.
"""

from abc import ABC, abstractmethod
from typing import List

from iiot_coordinator.domain.entities.device_health import (
    StatusChangeRecord,
    TelemetrySnapshot,
)


class IStatusChangeRepository(ABC):
    """Interface for status change repository implementations."""

    @abstractmethod
    async def save(self, record: StatusChangeRecord) -> StatusChangeRecord:
        """
        Persist a status change record.

        Raises:
            Exception: If the write is not acknowledged
        """
        pass


class ITelemetryRepository(ABC):
    """Read access to windowed telemetry rollups."""

    @abstractmethod
    async def get_latest_snapshots(self) -> List[TelemetrySnapshot]:
        """Return the most recent snapshot of every device that reported."""
        pass
