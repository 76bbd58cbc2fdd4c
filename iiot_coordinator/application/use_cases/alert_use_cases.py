"""
Alert Use Cases - Application Layer

Handlers for the three inbound alert channels. Each handler validates the
alert, resolves the devices it concerns through the Device Directory,
classifies it with the Decision Engine and hands the outcome to the
Command Dispatcher.
"""

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from iiot_coordinator.application.use_cases.command_dispatcher import (
    CommandDispatcher,
    clamp_priority,
    command_for_action,
)
from iiot_coordinator.application.use_cases.device_directory import DeviceDirectory
from iiot_coordinator.domain.entities.alerts import (
    CriticalErrorAlert,
    DeviceAlert,
    LineErrorAlert,
)
from iiot_coordinator.domain.entities.commands import (
    CommandName,
    InvocationResult,
    LineActionKind,
    LineCoordinationAction,
    SenderId,
)
from iiot_coordinator.domain.entities.decision import Decision, RecommendedAction
from iiot_coordinator.domain.entities.device import DeviceMetadata
from iiot_coordinator.domain.entities.errors import UnknownDeviceTypeError
from iiot_coordinator.domain.entities.parameters import (
    ActionParameters,
    BalanceRequest,
    BalanceTarget,
    OptimizeMode,
    OptimizeRequest,
    ProductionBoost,
)
from iiot_coordinator.domain.services.decision_engine import DecisionEngine
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

# Actions carried out by the line coordination consumer rather than by
# commands addressed straight to the affected devices.
LINE_COORDINATED_ACTIONS: Dict[RecommendedAction, LineActionKind] = {
    RecommendedAction.REDUCE_LOAD: LineActionKind.OPTIMIZE,
    RecommendedAction.OPTIMIZE_LOAD: LineActionKind.OPTIMIZE,
    RecommendedAction.COMPENSATE: LineActionKind.OPTIMIZE,
    RecommendedAction.BALANCE: LineActionKind.BALANCE,
    RecommendedAction.INVESTIGATE_AND_BOOST: LineActionKind.BALANCE,
}


async def _resolve_metadata(
    directory: DeviceDirectory, device_id: str
) -> Optional[DeviceMetadata]:
    try:
        return await directory.resolve_device(device_id)
    except UnknownDeviceTypeError as e:
        logger.warning("alerts.device_type_unknown", device_id=device_id, error=e.message)
        return None


class ProcessDeviceAlertUseCase:
    """Handles threshold alerts from the ``device-alerts`` channel."""

    def __init__(
        self,
        directory: DeviceDirectory,
        decision_engine: DecisionEngine,
        dispatcher: CommandDispatcher,
    ):
        self.directory = directory
        self.decision_engine = decision_engine
        self.dispatcher = dispatcher

    async def execute(self, alert: DeviceAlert) -> Optional[Decision]:
        """
        Classify a device alert and publish the resulting commands.

        Returns:
            The decision, or None when the alert was rejected as invalid
        """
        if not alert.device_id:
            logger.warning(
                "alerts.device.invalid", line_id=alert.line_id, reason="missing device id"
            )
            return None

        alert = await self._enrich(alert)
        members: Tuple[str, ...] = ()
        if alert.line_id and self.decision_engine.requires_line_members(alert):
            members = await self.directory.resolve_line_members(alert.line_id)

        decision = self.decision_engine.classify(alert, members)
        logger.info(
            "alerts.device.classified",
            device_id=alert.device_id,
            line_id=alert.line_id,
            alert_type=getattr(alert.alert_type, "value", None),
            action=getattr(decision.recommended_action, "value", None),
            urgency=decision.urgency.value,
            reason=decision.reason,
            affected=list(decision.affected_devices),
        )
        if not decision.has_action:
            return decision

        line_kind = LINE_COORDINATED_ACTIONS.get(decision.recommended_action)
        if line_kind is not None:
            await self.dispatcher.publish_line_action(
                LineCoordinationAction(
                    line_id=decision.line_id,
                    kind=line_kind,
                    affected_devices=decision.affected_devices,
                    parameters=_line_parameters(alert, decision),
                    reason=decision.reason,
                    priority=clamp_priority(decision.priority),
                )
            )
        else:
            await self.dispatcher.publish(self.dispatcher.dispatch(decision))
        return decision

    async def _enrich(self, alert: DeviceAlert) -> DeviceAlert:
        """Fill device type and line from the directory when the alert lacks them."""
        if alert.device_type is not None and alert.line_id:
            return alert
        metadata = await _resolve_metadata(self.directory, alert.device_id)
        if metadata is None:
            return alert
        return replace(
            alert,
            device_type=alert.device_type or metadata.device_type,
            line_id=alert.line_id or metadata.line_id or "",
        )


def _line_parameters(alert: DeviceAlert, decision: Decision) -> ActionParameters:
    action = decision.recommended_action
    if action == RecommendedAction.COMPENSATE:
        return OptimizeRequest(
            mode=OptimizeMode.COMPENSATE,
            focus_device=alert.device_id,
            error_count=alert.error_count,
        )
    if action in (RecommendedAction.REDUCE_LOAD, RecommendedAction.OPTIMIZE_LOAD):
        return OptimizeRequest(
            mode=OptimizeMode.REDUCE_LOAD,
            focus_device=alert.device_id,
            temperature=alert.temperature,
        )

    parameters = decision.parameters
    if isinstance(parameters, BalanceTarget):
        target = parameters.balance_target
    elif isinstance(parameters, ProductionBoost):
        target = parameters.boost_target
    else:
        return BalanceRequest(
            slow_device=alert.device_id, current_rate=alert.production_rate
        )
    return BalanceRequest(
        slow_device=alert.device_id,
        current_rate=alert.production_rate,
        target_rate=target,
    )


class ProcessCriticalAlertUseCase:
    """Handles immediate device errors from the ``critical-alerts`` channel."""

    def __init__(
        self,
        directory: DeviceDirectory,
        decision_engine: DecisionEngine,
        dispatcher: CommandDispatcher,
    ):
        self.directory = directory
        self.decision_engine = decision_engine
        self.dispatcher = dispatcher

    async def execute(self, alert: CriticalErrorAlert) -> List[InvocationResult]:
        if not alert.device_id or alert.device_error <= 0:
            logger.warning(
                "alerts.critical.invalid",
                device_id=alert.device_id,
                device_error=alert.device_error,
                reason="missing device id or error code",
            )
            return []

        logger.warning(
            "alerts.critical.received",
            device_id=alert.device_id,
            line_id=alert.line_id,
            device_error=alert.device_error,
            error_priority=alert.error_priority,
        )

        members: Tuple[str, ...] = ()
        if self.decision_engine.requires_line_members(alert):
            line_id = alert.line_id
            if not line_id:
                metadata = await _resolve_metadata(self.directory, alert.device_id)
                line_id = metadata.line_id if metadata else None
                alert = replace(alert, line_id=line_id or "")
            if line_id:
                members = await self.directory.resolve_line_members(line_id)

        decision = self.decision_engine.classify(alert, members)
        command_name = command_for_action(decision.recommended_action)
        if command_name is None:
            return []

        results = []
        for device_id in decision.affected_devices:
            results.append(
                await self.dispatcher.invoke_direct(
                    device_id,
                    command_name,
                    decision.reason,
                    alert_id=alert.alert_id,
                    alert_time=alert.event_time,
                )
            )

        logger.info(
            "alerts.critical.handled",
            device_id=alert.device_id,
            action=decision.recommended_action.value,
            command=command_name.value,
            sender_id=SenderId.CRITICAL_ALERT_AGENT.value,
            devices=len(results),
            succeeded=sum(1 for result in results if result.succeeded),
        )
        return results


class ProcessLineAlertUseCase:
    """Handles windowed line error patterns from the ``line-alerts`` channel."""

    def __init__(
        self,
        directory: DeviceDirectory,
        decision_engine: DecisionEngine,
        dispatcher: CommandDispatcher,
    ):
        self.directory = directory
        self.decision_engine = decision_engine
        self.dispatcher = dispatcher

    async def execute(self, alert: LineErrorAlert) -> List[InvocationResult]:
        if not alert.line_id or alert.error_count <= 0:
            logger.warning(
                "alerts.line.invalid",
                line_id=alert.line_id,
                error_count=alert.error_count,
                reason="missing line id or error count",
            )
            return []

        logger.warning(
            "alerts.line.received",
            line_id=alert.line_id,
            error_count=alert.error_count,
            max_error_code=alert.max_error_code,
            priority=alert.priority,
        )

        members = await self.directory.resolve_line_members(alert.line_id)
        decision = self.decision_engine.classify_line_alert(alert, members)

        results = []
        for device_id in decision.affected_devices:
            results.append(
                await self.dispatcher.invoke_direct(
                    device_id,
                    CommandName.RESET_ERROR_STATUS,
                    decision.reason,
                    alert_id=alert.alert_id,
                    alert_time=alert.alert_time,
                )
            )

        logger.info(
            "alerts.line.handled",
            line_id=alert.line_id,
            sender_id=SenderId.LINE_ALERT_AGENT.value,
            devices=len(results),
            succeeded=sum(1 for result in results if result.succeeded),
        )
        return results
