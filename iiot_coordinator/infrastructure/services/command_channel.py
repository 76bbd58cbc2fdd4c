"""Celery-backed implementation of the outbound command channel."""

from __future__ import annotations

import asyncio
from typing import Sequence

from celery import Celery

from iiot_coordinator.application.dtos.command_dto import (
    DeviceCommandDTO,
    LineCoordinationDTO,
)
from iiot_coordinator.domain.entities.commands import (
    Command,
    LineCoordinationAction,
    SenderId,
)
from iiot_coordinator.infrastructure.services.celery_config import (
    COORDINATE_LINE_TASK,
    DEVICE_COMMANDS_QUEUE,
    EXECUTE_DEVICE_COMMAND_TASK,
    LINE_COORDINATION_QUEUE,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)


class CeleryCommandChannel:
    """Publish ``DeviceCommand`` and ``LineCoordination`` messages through Celery."""

    def __init__(
        self,
        celery_app: Celery,
        commands_queue: str = DEVICE_COMMANDS_QUEUE,
        coordination_queue: str = LINE_COORDINATION_QUEUE,
    ) -> None:
        self._celery_app = celery_app
        self._commands_queue = commands_queue
        self._coordination_queue = coordination_queue

    async def publish_commands(self, commands: Sequence[Command]) -> int:
        if not commands:
            return 0

        messages = [DeviceCommandDTO.from_domain(command) for command in commands]

        def _send() -> int:
            for message in messages:
                self._celery_app.send_task(
                    EXECUTE_DEVICE_COMMAND_TASK,
                    kwargs={"message": message.to_wire()},
                    queue=self._commands_queue,
                )
                logger.info(
                    "channel.command_published",
                    device_id=message.device_id,
                    command=message.command,
                    message_id=message.message_id,
                    queue=self._commands_queue,
                )
            return len(messages)

        return await asyncio.to_thread(_send)

    async def publish_line_action(self, action: LineCoordinationAction) -> None:
        message = LineCoordinationDTO.from_domain(
            action, sender_id=SenderId.DECISION_AGENT.value
        )

        def _send() -> None:
            self._celery_app.send_task(
                COORDINATE_LINE_TASK,
                kwargs={"message": message.to_wire()},
                queue=self._coordination_queue,
            )

        await asyncio.to_thread(_send)
        logger.info(
            "channel.line_action_published",
            line_id=action.line_id,
            kind=action.kind.value,
            devices=len(action.affected_devices),
            queue=self._coordination_queue,
        )
