"""Celery tasks consuming the three alert channels."""

import asyncio
from typing import Any, Dict, Optional

from iiot_coordinator.application.dtos.alert_dto import (
    CriticalErrorAlertDTO,
    DeviceAlertDTO,
    LineErrorAlertDTO,
)
from iiot_coordinator.infrastructure.services.celery_config import (
    PROCESS_CRITICAL_ALERT_TASK,
    PROCESS_DEVICE_ALERT_TASK,
    PROCESS_LINE_ALERT_TASK,
    celery_app,
)
from iiot_coordinator.infrastructure.services.tasks.base import CallbackTask, logger
from iiot_coordinator.shared import bind_message_context


@celery_app.task(bind=True, base=CallbackTask, name=PROCESS_DEVICE_ALERT_TASK)
def process_device_alert(
    self, message: Dict[str, Any], alert_id: Optional[str] = None
) -> Dict[str, Any]:
    """Classify a device alert and publish the resulting commands."""
    # A malformed payload raises here and is redelivered by the transport.
    alert = DeviceAlertDTO.model_validate(message).to_domain(alert_id=alert_id)
    bind_message_context(
        task_id=self.request.id, alert_id=alert_id, device_id=alert.device_id
    )
    logger.info(
        "alerts.device.received",
        alert_type=alert.alert_type.value if alert.alert_type else None,
        line_id=alert.line_id,
    )

    use_case = self.container.process_device_alert_use_case()
    decision = asyncio.run(use_case.execute(alert))
    if decision is None:
        return {"status": "rejected", "device_id": alert.device_id}

    return {
        "status": "processed",
        "device_id": decision.device_id,
        "action": (
            decision.recommended_action.value if decision.recommended_action else None
        ),
        "urgency": decision.urgency.value,
        "affected_devices": list(decision.affected_devices),
    }


@celery_app.task(bind=True, base=CallbackTask, name=PROCESS_CRITICAL_ALERT_TASK)
def process_critical_alert(
    self, message: Dict[str, Any], alert_id: Optional[str] = None
) -> Dict[str, Any]:
    """Handle a critical error alert with direct device invocations."""
    alert = CriticalErrorAlertDTO.model_validate(message).to_domain(alert_id=alert_id)
    bind_message_context(
        task_id=self.request.id, alert_id=alert_id, device_id=alert.device_id
    )
    logger.info(
        "alerts.critical.received",
        error_code=alert.device_error,
        line_id=alert.line_id,
    )

    use_case = self.container.process_critical_alert_use_case()
    results = asyncio.run(use_case.execute(alert))
    return {
        "device_id": alert.device_id,
        "invocations": [
            {"device_id": result.device_id, "outcome": result.outcome.value}
            for result in results
        ],
    }


@celery_app.task(bind=True, base=CallbackTask, name=PROCESS_LINE_ALERT_TASK)
def process_line_alert(
    self, message: Dict[str, Any], alert_id: Optional[str] = None
) -> Dict[str, Any]:
    """Reset every device of a line showing an error pattern."""
    alert = LineErrorAlertDTO.model_validate(message).to_domain(alert_id=alert_id)
    bind_message_context(task_id=self.request.id, alert_id=alert_id, line_id=alert.line_id)
    logger.info(
        "alerts.line.received",
        error_count=alert.error_count,
        max_error_code=alert.max_error_code,
    )

    use_case = self.container.process_line_alert_use_case()
    results = asyncio.run(use_case.execute(alert))
    return {
        "line_id": alert.line_id,
        "invocations": [
            {"device_id": result.device_id, "outcome": result.outcome.value}
            for result in results
        ],
    }
