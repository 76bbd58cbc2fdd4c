"""
Device Use Cases - Application Layer

Operator-facing device operations: queueing commands, patching desired
properties and inspecting or clearing the Device Directory.
"""

from typing import Any, Dict, Optional

from iiot_coordinator.application.dtos.command_dto import (
    DeviceCommandDTO,
    DeviceCommandQueuedDTO,
    DeviceCommandRequestDTO,
    TwinUpdateResponseDTO,
)
from iiot_coordinator.application.dtos.directory_dto import (
    DeviceMetadataDTO,
    DirectoryInvalidatedDTO,
    LineMembersDTO,
)
from iiot_coordinator.application.use_cases.command_dispatcher import (
    CommandDispatcher,
    clamp_priority,
)
from iiot_coordinator.application.use_cases.device_directory import DeviceDirectory
from iiot_coordinator.domain.entities.commands import (
    Command,
    CommandName,
    InvocationResult,
    SenderId,
)
from iiot_coordinator.domain.entities.errors import InvalidCommandError
from iiot_coordinator.domain.entities.parameters import (
    NO_PARAMETERS,
    OperatorParameters,
)
from iiot_coordinator.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)


def _parse_command_name(command: str) -> CommandName:
    try:
        return CommandName(command)
    except ValueError as e:
        raise InvalidCommandError(
            command, details={"allowed": [name.value for name in CommandName]}
        ) from e


class QueueDeviceCommandUseCase:
    """Queues an operator command on the ``device-commands`` channel."""

    def __init__(self, dispatcher: CommandDispatcher):
        self.dispatcher = dispatcher

    async def execute(
        self, device_id: str, request: DeviceCommandRequestDTO
    ) -> DeviceCommandQueuedDTO:
        """
        Raises:
            InvalidCommandError: If the command name is missing or unknown
        """
        if not request.command:
            raise InvalidCommandError("", details={"reason": "missing command name"})

        values: Dict[str, Any] = dict(request.parameters)
        reason = values.pop("Reason", None)
        command = Command(
            device_id=device_id,
            command_name=_parse_command_name(request.command),
            sender_id=SenderId.OPERATOR_UI.value,
            reason=str(reason) if reason is not None else "",
            parameters=OperatorParameters.from_mapping(values) if values else NO_PARAMETERS,
            priority=clamp_priority(request.priority or 1),
            requires_ack=True,
        )
        await self.dispatcher.publish([command])

        logger.info(
            "devices.command_queued",
            device_id=device_id,
            command=command.command_name.value,
            message_id=command.message_id,
        )
        return DeviceCommandQueuedDTO(
            message_id=command.message_id,
            device_id=device_id,
            command=command.command_name.value,
        )


class UpdateDeviceTwinUseCase:
    """Patches one desired property of a device twin."""

    def __init__(self, registry_gateway: IDeviceRegistryGateway):
        self.registry_gateway = registry_gateway

    async def execute(
        self, device_id: str, property_name: str, property_value: Any
    ) -> TwinUpdateResponseDTO:
        logger.info(
            "devices.twin_update",
            device_id=device_id,
            property_name=property_name,
            value_type=type(property_value).__name__,
        )
        await self.registry_gateway.update_desired_property(
            device_id, property_name, property_value
        )
        return TwinUpdateResponseDTO(
            message=f"Device twin updated: {property_name} = {property_value}"
        )


class GetDeviceMetadataUseCase:
    def __init__(self, directory: DeviceDirectory):
        self.directory = directory

    async def execute(self, device_id: str) -> DeviceMetadataDTO:
        metadata = await self.directory.resolve_device(device_id)
        return DeviceMetadataDTO.from_domain(metadata)


class GetLineMembersUseCase:
    def __init__(self, directory: DeviceDirectory):
        self.directory = directory

    async def execute(self, line_id: str) -> LineMembersDTO:
        members = await self.directory.resolve_line_members(line_id)
        return LineMembersDTO(line_id=line_id, devices=list(members))


class InvalidateDirectoryUseCase:
    def __init__(self, directory: DeviceDirectory):
        self.directory = directory

    def execute(self, reason: Optional[str] = None) -> DirectoryInvalidatedDTO:
        logger.info("directory.invalidate_requested", reason=reason)
        self.directory.invalidate()
        return DirectoryInvalidatedDTO()


class ExecuteQueuedCommandUseCase:
    """Consumer side of ``device-commands``: delivers a queued command."""

    def __init__(self, dispatcher: CommandDispatcher):
        self.dispatcher = dispatcher

    async def execute(self, message: DeviceCommandDTO) -> Optional[InvocationResult]:
        """
        Returns:
            The invocation result, or None when the message was rejected

        Raises:
            DeviceRegistryError: If delivery failed and should be retried
        """
        if not message.device_id:
            logger.warning(
                "commands.invalid", message_id=message.message_id, reason="missing device id"
            )
            return None
        try:
            command = message.to_domain()
        except ValueError:
            logger.warning(
                "commands.unknown_name",
                device_id=message.device_id,
                command=message.command,
                message_id=message.message_id,
            )
            return None

        logger.info(
            "commands.executing",
            device_id=command.device_id,
            command=command.command_name.value,
            sender_id=command.sender_id,
            priority=command.priority,
        )
        return await self.dispatcher.execute(command)
