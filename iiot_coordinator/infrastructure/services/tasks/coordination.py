"""Celery task consuming the line coordination channel."""

import asyncio
from typing import Any, Dict

from iiot_coordinator.application.dtos.command_dto import LineCoordinationDTO
from iiot_coordinator.infrastructure.services.celery_config import (
    COORDINATE_LINE_TASK,
    celery_app,
)
from iiot_coordinator.infrastructure.services.tasks.base import CallbackTask
from iiot_coordinator.shared import bind_message_context


@celery_app.task(bind=True, base=CallbackTask, name=COORDINATE_LINE_TASK)
def coordinate_line(self, message: Dict[str, Any]) -> Dict[str, Any]:
    """Expand a line-scoped action into per-device commands and publish them."""
    action = LineCoordinationDTO.model_validate(message).to_domain()
    bind_message_context(
        task_id=self.request.id, message_id=action.message_id, line_id=action.line_id
    )
    router = self.container.line_coordination_router()
    commands = asyncio.run(router.coordinate(action))
    return {
        "line_id": action.line_id,
        "commands": [
            {"device_id": command.device_id, "command": command.command_name.value}
            for command in commands
        ],
    }
