"""MongoDB repository implementations."""

from .status_change_repository import StatusChangeRepository
from .telemetry_repository import TelemetryRepository

__all__ = ["StatusChangeRepository", "TelemetryRepository"]
