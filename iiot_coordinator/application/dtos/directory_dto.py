"""DTOs exposing Device Directory entries."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from iiot_coordinator.domain.entities.device import DeviceMetadata, DeviceType


class DeviceMetadataDTO(BaseModel):
    """Resolved metadata of a single device."""

    device_id: str = Field(description="Device identifier")
    device_type: DeviceType = Field(description="Inferred device type")
    line_id: Optional[str] = Field(default=None, description="Owning line")
    line_name: Optional[str] = Field(default=None, description="Line display name")
    connection_status: Optional[str] = Field(default=None)
    health: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    is_fallback: bool = Field(
        default=False, description="True when the registry could not be reached"
    )
    last_updated: datetime = Field(description="When the entry was resolved")

    @classmethod
    def from_domain(cls, metadata: DeviceMetadata) -> "DeviceMetadataDTO":
        return cls(
            device_id=metadata.device_id,
            device_type=metadata.device_type,
            line_id=metadata.line_id,
            line_name=metadata.line_name,
            connection_status=metadata.connection_status,
            health=metadata.health,
            state=metadata.state,
            is_fallback=metadata.is_fallback,
            last_updated=metadata.last_updated,
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "device_id": "Press1",
                "device_type": "Press",
                "line_id": "Line1",
                "line_name": "Primary Assembly Line",
                "connection_status": "connected",
                "health": "healthy",
                "state": "running",
                "is_fallback": False,
                "last_updated": "2025-10-04T12:00:00Z",
            }
        }
    }


class LineMembersDTO(BaseModel):
    line_id: str
    devices: List[str] = Field(default_factory=list)


class DirectoryInvalidatedDTO(BaseModel):
    cleared: bool = True
    message: str = "Device directory caches cleared"
