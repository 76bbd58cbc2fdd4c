from __future__ import annotations

import pytest

from iiot_coordinator.application.dtos.command_dto import (
    DeviceCommandDTO,
    DeviceCommandRequestDTO,
)
from iiot_coordinator.application.use_cases.device_use_cases import (
    ExecuteQueuedCommandUseCase,
    GetDeviceMetadataUseCase,
    GetLineMembersUseCase,
    InvalidateDirectoryUseCase,
    QueueDeviceCommandUseCase,
    UpdateDeviceTwinUseCase,
)
from iiot_coordinator.domain.entities.commands import CommandName, InvocationOutcome
from iiot_coordinator.domain.entities.device import DeviceType
from iiot_coordinator.domain.entities.errors import (
    DeviceNotFoundError,
    DeviceRegistryError,
    InvalidCommandError,
)
from iiot_coordinator.domain.entities.parameters import OperatorParameters


@pytest.mark.asyncio
async def test_queue_device_command(dispatcher, channel) -> None:
    request = DeviceCommandRequestDTO(
        command="AdjustProductionRate",
        parameters={"TargetRate": 60, "Reason": "operator request"},
        priority=2,
    )

    result = await QueueDeviceCommandUseCase(dispatcher).execute("Press1", request)

    (command,) = channel.commands
    assert command.command_name is CommandName.ADJUST_PRODUCTION_RATE
    assert command.sender_id == "PWA-UI"
    assert command.priority == 2
    assert command.reason == "operator request"
    assert command.parameters == OperatorParameters.from_mapping({"TargetRate": 60})
    assert result.message_id == command.message_id
    assert result.device_id == "Press1"
    assert result.command == "AdjustProductionRate"
    assert result.success is True


@pytest.mark.asyncio
@pytest.mark.parametrize("name", [None, "", "SelfDestruct"])
async def test_queue_device_command_rejects_unknown_names(dispatcher, channel, name):
    request = DeviceCommandRequestDTO(command=name)

    with pytest.raises(InvalidCommandError):
        await QueueDeviceCommandUseCase(dispatcher).execute("Press1", request)
    assert channel.commands == []


@pytest.mark.asyncio
async def test_update_device_twin(registry) -> None:
    result = await UpdateDeviceTwinUseCase(registry).execute(
        "Press1", "targetProductionRate", 60
    )

    assert registry.desired_updates == [("Press1", "targetProductionRate", 60)]
    assert result.message == "Device twin updated: targetProductionRate = 60"


@pytest.mark.asyncio
async def test_update_device_twin_unknown_device(registry) -> None:
    with pytest.raises(DeviceNotFoundError):
        await UpdateDeviceTwinUseCase(registry).execute("Ghost1", "x", 1)


@pytest.mark.asyncio
async def test_get_device_metadata(directory) -> None:
    dto = await GetDeviceMetadataUseCase(directory).execute("Press1")

    assert dto.device_type is DeviceType.PRESS
    assert dto.line_id == "Line1"
    assert dto.is_fallback is False


@pytest.mark.asyncio
async def test_get_line_members(directory) -> None:
    dto = await GetLineMembersUseCase(directory).execute("Line2")

    assert dto.line_id == "Line2"
    assert dto.devices == ["Press2"]


@pytest.mark.asyncio
async def test_invalidate_directory(directory, registry) -> None:
    await directory.resolve_line_members("Line1")

    dto = InvalidateDirectoryUseCase(directory).execute(reason="topology changed")
    await directory.resolve_line_members("Line1")

    assert dto.cleared is True
    assert registry.list_calls == 2


@pytest.mark.asyncio
async def test_execute_queued_command(dispatcher, registry) -> None:
    message = DeviceCommandDTO(
        device_id="Press1",
        command="EmergencyStop",
        sender_id="LineCoordinationAgent",
        parameters={"LineId": "Line1", "Reason": "stop"},
    )

    result = await ExecuteQueuedCommandUseCase(dispatcher).execute(message)

    assert result.outcome is InvocationOutcome.SUCCEEDED
    assert registry.invocations[0]["method_name"] == "HandleEmergencyStopAsync"
    assert registry.invocations[0]["payload"] == {"LineId": "Line1", "Reason": "stop"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "message",
    [
        DeviceCommandDTO(device_id="", command="Reset"),
        DeviceCommandDTO(device_id="Press1", command="Teleport"),
    ],
)
async def test_execute_queued_command_rejects_invalid_messages(
    dispatcher, registry, message
) -> None:
    assert await ExecuteQueuedCommandUseCase(dispatcher).execute(message) is None
    assert registry.invocations == []


@pytest.mark.asyncio
async def test_execute_queued_command_raises_for_redelivery(dispatcher, registry) -> None:
    registry.fail_invoke = DeviceRegistryError("registry down", status_code=503)
    message = DeviceCommandDTO(device_id="Press1", command="Reset")

    with pytest.raises(DeviceRegistryError):
        await ExecuteQueuedCommandUseCase(dispatcher).execute(message)
