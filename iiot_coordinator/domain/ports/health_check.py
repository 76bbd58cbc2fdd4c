"""Domain service abstraction for dependency health checks."""

from __future__ import annotations

from typing import Protocol

from iiot_coordinator.domain.entities.system_health import SystemHealth


class IHealthCheckService(Protocol):
    """Interface for retrieving system health information."""

    async def evaluate(self) -> SystemHealth:
        """Collect and aggregate health information for dependencies."""
        ...
