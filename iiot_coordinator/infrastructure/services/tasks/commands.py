"""Celery task consuming the device command channel."""

import asyncio
from typing import Any, Dict

from iiot_coordinator.application.dtos.command_dto import DeviceCommandDTO
from iiot_coordinator.infrastructure.services.celery_config import (
    EXECUTE_DEVICE_COMMAND_TASK,
    celery_app,
)
from iiot_coordinator.infrastructure.services.tasks.base import CallbackTask, logger
from iiot_coordinator.shared import bind_message_context


@celery_app.task(bind=True, base=CallbackTask, name=EXECUTE_DEVICE_COMMAND_TASK)
def execute_device_command(self, message: Dict[str, Any]) -> Dict[str, Any]:
    """Deliver a queued command to its device through the registry."""
    command = DeviceCommandDTO.model_validate(message)
    bind_message_context(
        task_id=self.request.id,
        message_id=command.message_id,
        device_id=command.device_id,
    )
    logger.debug("commands.received", command=command.command, sender_id=command.sender_id)

    use_case = self.container.execute_queued_command_use_case()
    result = asyncio.run(use_case.execute(command))
    if result is None:
        return {"status": "rejected", "message_id": command.message_id}
    return {
        "status": result.outcome.value,
        "device_id": result.device_id,
        "method_name": result.method_name,
        "status_code": result.status_code,
    }
