"""DTOs for the dependency health response."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from iiot_coordinator.domain.entities.system_health import (
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)


class DependencyStatusDTO(BaseModel):
    """Result of checking one dependency."""

    name: str = Field(description="Dependency identifier")
    status: ServiceStatus = Field(description="Status of the dependency")
    message: Optional[str] = Field(default=None, description="Status note")
    checked_at: datetime = Field(description="When the check ran")
    latency_ms: Optional[float] = Field(default=None, description="Check latency")
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, status: DependencyStatus) -> "DependencyStatusDTO":
        return cls(
            name=status.name,
            status=status.status,
            message=status.message,
            checked_at=status.checked_at,
            latency_ms=status.latency_ms,
            details=status.details,
        )


class SystemHealthDTO(BaseModel):
    """Payload of ``GET /health``."""

    status: ServiceStatus = Field(description="Overall status")
    dependencies: List[DependencyStatusDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, health: SystemHealth) -> "SystemHealthDTO":
        return cls(
            status=health.status,
            dependencies=[
                DependencyStatusDTO.from_domain(dep) for dep in health.dependencies
            ],
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "up",
                "dependencies": [
                    {
                        "name": "device_registry",
                        "status": "up",
                        "message": "Device registry reachable",
                        "checked_at": "2025-10-04T12:00:00Z",
                        "latency_ms": 18.2,
                        "details": {"url": "http://registry:8080"},
                    }
                ],
            }
        }
    }
