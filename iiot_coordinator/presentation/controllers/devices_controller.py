"""
Devices Router - Presentation Layer

Operator endpoints for queueing device commands, patching desired twin
properties and inspecting Device Directory entries.
"""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, status

from iiot_coordinator.application.dtos.command_dto import (
    DeviceCommandQueuedDTO,
    DeviceCommandRequestDTO,
    TwinUpdateRequestDTO,
    TwinUpdateResponseDTO,
)
from iiot_coordinator.application.dtos.directory_dto import DeviceMetadataDTO
from iiot_coordinator.application.use_cases.device_use_cases import (
    GetDeviceMetadataUseCase,
    QueueDeviceCommandUseCase,
    UpdateDeviceTwinUseCase,
)
from iiot_coordinator.domain.entities.errors import (
    DeviceNotFoundError,
    DeviceRegistryError,
    InvalidCommandError,
    UnknownDeviceTypeError,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/devices", tags=["Devices"])


@router.post(
    "/{device_id}/command",
    response_model=DeviceCommandQueuedDTO,
    status_code=status.HTTP_202_ACCEPTED,
)
@inject
async def queue_device_command(
    device_id: str,
    request: DeviceCommandRequestDTO,
    queue_device_command_use_case: QueueDeviceCommandUseCase = Depends(
        Provide["queue_device_command_use_case"]
    ),
) -> DeviceCommandQueuedDTO:
    """
    Queue a command for a device on the ``device-commands`` channel.

    The command is delivered asynchronously by the worker; a 202 only means
    it was handed to the broker.
    """
    logger.info("devices.command.requested", device_id=device_id, command=request.command)
    try:
        return await queue_device_command_use_case.execute(device_id, request)
    except InvalidCommandError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, **e.details},
        )
    except Exception as e:
        logger.error(
            "devices.command.queue_failed",
            device_id=device_id,
            error=str(e),
            exc_info=e,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to queue command: {str(e)}",
        )


@router.post("/{device_id}/twin", response_model=TwinUpdateResponseDTO)
@inject
async def update_device_twin(
    device_id: str,
    request: TwinUpdateRequestDTO,
    update_device_twin_use_case: UpdateDeviceTwinUseCase = Depends(
        Provide["update_device_twin_use_case"]
    ),
) -> TwinUpdateResponseDTO:
    """Patch one desired property of the device twin."""
    try:
        return await update_device_twin_use_case.execute(
            device_id, request.property_name, request.property_value
        )
    except DeviceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except DeviceRegistryError as e:
        logger.error(
            "devices.twin.update_failed",
            device_id=device_id,
            property_name=request.property_name,
            error=e.message,
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Device registry rejected the update: {e.message}",
        )


@router.get("/{device_id}/metadata", response_model=DeviceMetadataDTO)
@inject
async def get_device_metadata(
    device_id: str,
    get_device_metadata_use_case: GetDeviceMetadataUseCase = Depends(
        Provide["get_device_metadata_use_case"]
    ),
) -> DeviceMetadataDTO:
    """Return the directory entry of a device, resolving it if needed."""
    try:
        return await get_device_metadata_use_case.execute(device_id)
    except UnknownDeviceTypeError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message
        )
