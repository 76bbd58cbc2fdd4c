"""
Use Cases Package - Application Layer

Alert handlers, the Device Directory, the Command Dispatcher, the Line
Coordination Router and the Health-State Monitor, plus the operator and
optimisation use cases behind the HTTP API.
"""

from .alert_use_cases import (
    ProcessCriticalAlertUseCase,
    ProcessDeviceAlertUseCase,
    ProcessLineAlertUseCase,
)
from .command_dispatcher import CommandDispatcher
from .device_directory import DeviceDirectory
from .device_use_cases import (
    ExecuteQueuedCommandUseCase,
    GetDeviceMetadataUseCase,
    GetLineMembersUseCase,
    InvalidateDirectoryUseCase,
    QueueDeviceCommandUseCase,
    UpdateDeviceTwinUseCase,
)
from .health_monitor import HealthStateMonitor
from .health_use_cases import GetHealthStatusUseCase
from .line_coordination import LineCoordinationRouter
from .optimization_use_cases import (
    AnalyzePlantOptimizationUseCase,
    OptimizeProductionLineUseCase,
)

__all__ = [
    "AnalyzePlantOptimizationUseCase",
    "CommandDispatcher",
    "DeviceDirectory",
    "ExecuteQueuedCommandUseCase",
    "GetDeviceMetadataUseCase",
    "GetHealthStatusUseCase",
    "GetLineMembersUseCase",
    "HealthStateMonitor",
    "InvalidateDirectoryUseCase",
    "LineCoordinationRouter",
    "OptimizeProductionLineUseCase",
    "ProcessCriticalAlertUseCase",
    "ProcessDeviceAlertUseCase",
    "ProcessLineAlertUseCase",
    "QueueDeviceCommandUseCase",
    "UpdateDeviceTwinUseCase",
]
