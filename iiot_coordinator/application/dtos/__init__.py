"""
DTOs Package - Application Layer

Wire models for the alert, command and coordination channels and the
request/response bodies of the HTTP API.
"""

from .alert_dto import CriticalErrorAlertDTO, DeviceAlertDTO, LineErrorAlertDTO
from .command_dto import (
    DeviceCommandDTO,
    DeviceCommandQueuedDTO,
    DeviceCommandRequestDTO,
    LineCoordinationDTO,
    TwinUpdateRequestDTO,
    TwinUpdateResponseDTO,
)
from .directory_dto import DeviceMetadataDTO, DirectoryInvalidatedDTO, LineMembersDTO
from .health_dto import DependencyStatusDTO, SystemHealthDTO
from .optimization_dto import (
    DeviceStatusDTO,
    LineOptimizationRequestDTO,
    LineOptimizationResultDTO,
    LineStatusDTO,
    PlantAnalysisRequestDTO,
    PlantOptimizationResultDTO,
)

__all__ = [
    "CriticalErrorAlertDTO",
    "DependencyStatusDTO",
    "DeviceAlertDTO",
    "DeviceCommandDTO",
    "DeviceCommandQueuedDTO",
    "DeviceCommandRequestDTO",
    "DeviceMetadataDTO",
    "DeviceStatusDTO",
    "DirectoryInvalidatedDTO",
    "LineCoordinationDTO",
    "LineErrorAlertDTO",
    "LineMembersDTO",
    "LineOptimizationRequestDTO",
    "LineOptimizationResultDTO",
    "LineStatusDTO",
    "PlantAnalysisRequestDTO",
    "PlantOptimizationResultDTO",
    "SystemHealthDTO",
    "TwinUpdateRequestDTO",
    "TwinUpdateResponseDTO",
]
