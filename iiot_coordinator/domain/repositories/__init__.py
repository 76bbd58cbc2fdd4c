"""Repository interfaces for the domain layer."""

from .status_change_repository import IStatusChangeRepository, ITelemetryRepository

__all__ = ["IStatusChangeRepository", "ITelemetryRepository"]
