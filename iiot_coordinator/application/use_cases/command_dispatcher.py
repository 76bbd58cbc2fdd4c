"""
Command Dispatcher - Application Layer

Turns decisions into per-device commands, hands commands and line actions
to the outbound channel and talks to devices directly through the registry.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from iiot_coordinator.domain.entities.commands import (
    MAX_PRIORITY,
    MIN_PRIORITY,
    Command,
    CommandName,
    InvocationOutcome,
    InvocationResult,
    LineCoordinationAction,
    SenderId,
)
from iiot_coordinator.domain.entities.decision import Decision, RecommendedAction
from iiot_coordinator.domain.entities.errors import DeviceRegistryError
from iiot_coordinator.domain.entities.parameters import NO_PARAMETERS, ActionParameters
from iiot_coordinator.domain.gateways.command_channel import ICommandChannel
from iiot_coordinator.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

SUCCESS_STATUS = 200

ACTION_COMMANDS: Dict[RecommendedAction, CommandName] = {
    RecommendedAction.EMERGENCY_STOP: CommandName.EMERGENCY_STOP,
    RecommendedAction.POWER_FAILURE_PROTOCOL: CommandName.EMERGENCY_STOP,
    RecommendedAction.REDUCE_LOAD: CommandName.ADJUST_PRODUCTION_RATE,
    RecommendedAction.OPTIMIZE_LOAD: CommandName.ADJUST_PRODUCTION_RATE,
    RecommendedAction.COMPENSATE: CommandName.ADJUST_PRODUCTION_RATE,
    RecommendedAction.INVESTIGATE_AND_BOOST: CommandName.ADJUST_PRODUCTION_RATE,
    RecommendedAction.BALANCE: CommandName.ADJUST_PRODUCTION_RATE,
    RecommendedAction.STOP_AND_RESET: CommandName.RESET_ERROR_STATUS,
    RecommendedAction.IMMEDIATE_RESET: CommandName.RESET_ERROR_STATUS,
    RecommendedAction.SENSOR_DIAGNOSTIC: CommandName.RESET_ERROR_STATUS,
    RecommendedAction.DIAGNOSTIC_SCAN: CommandName.RESET_ERROR_STATUS,
    RecommendedAction.RESET: CommandName.RESET,
    RecommendedAction.QUALITY_INVESTIGATION: CommandName.ADJUST_QUALITY,
    RecommendedAction.QUALITY_ADJUSTMENT: CommandName.ADJUST_QUALITY,
    RecommendedAction.COMPRESSOR_MAINTENANCE: CommandName.SCHEDULE_MAINTENANCE,
    RecommendedAction.INCREASE_COMPRESSION: CommandName.ADJUST_PRESSURE,
    RecommendedAction.REDUCE_PRESSURE: CommandName.ADJUST_PRESSURE,
    RecommendedAction.ADJUST_SPEED: CommandName.ADJUST_SPEED,
    RecommendedAction.REDUCE_SPEED: CommandName.ADJUST_SPEED,
}


def command_for_action(action: Optional[RecommendedAction]) -> Optional[CommandName]:
    """Device command implementing an action; None for Monitor or no action."""
    if action is None:
        return None
    return ACTION_COMMANDS.get(action)


def clamp_priority(priority: int) -> int:
    return max(MIN_PRIORITY, min(MAX_PRIORITY, priority))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommandDispatcher:
    """Expands decisions into commands and delivers them to devices."""

    def __init__(
        self,
        registry_gateway: IDeviceRegistryGateway,
        command_channel: ICommandChannel,
        direct_timeout_seconds: float = 10.0,
        queued_timeout_seconds: float = 30.0,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.registry_gateway = registry_gateway
        self.command_channel = command_channel
        self.direct_timeout_seconds = direct_timeout_seconds
        self.queued_timeout_seconds = queued_timeout_seconds
        self._clock = clock

    def dispatch(
        self, decision: Decision, sender_id: str = SenderId.DECISION_AGENT.value
    ) -> List[Command]:
        """One command per affected device; empty when the decision has no effect."""
        command_name = command_for_action(decision.recommended_action)
        if command_name is None:
            logger.debug(
                "dispatcher.dispatch.noop",
                device_id=decision.device_id,
                action=getattr(decision.recommended_action, "value", None),
            )
            return []

        return [
            Command(
                device_id=device_id,
                command_name=command_name,
                sender_id=sender_id,
                reason=decision.reason,
                parameters=decision.parameters,
                priority=clamp_priority(decision.priority),
                line_id=decision.line_id or None,
            )
            for device_id in decision.affected_devices
        ]

    async def publish(self, commands: Sequence[Command]) -> int:
        if not commands:
            return 0
        published = await self.command_channel.publish_commands(commands)
        logger.info(
            "dispatcher.published",
            count=published,
            devices=[command.device_id for command in commands],
            command=commands[0].command_name.value,
        )
        return published

    async def publish_line_action(self, action: LineCoordinationAction) -> None:
        await self.command_channel.publish_line_action(action)
        logger.info(
            "dispatcher.line_action_published",
            line_id=action.line_id,
            kind=action.kind.value if action.kind else action.raw_kind,
            devices=list(action.affected_devices),
        )

    async def invoke_direct(
        self,
        device_id: str,
        command_name: CommandName,
        reason: str = "",
        *,
        parameters: ActionParameters = NO_PARAMETERS,
        alert_id: Optional[str] = None,
        alert_time: Optional[datetime] = None,
    ) -> InvocationResult:
        """
        Invoke a device method synchronously with the device-safety timeout.

        Offline devices are skipped. Non-200 replies and registry errors are
        reported as failed results and never raised.
        """
        method_name = command_name.value
        try:
            twin = await self.registry_gateway.get_twin(device_id)
        except DeviceRegistryError as e:
            logger.error(
                "dispatcher.invoke.twin_failed",
                device_id=device_id,
                method=method_name,
                error=e.message,
            )
            return InvocationResult(
                device_id=device_id,
                method_name=method_name,
                outcome=InvocationOutcome.FAILED,
                message=e.message,
                alert_id=alert_id,
            )

        if not twin.is_connected:
            logger.warning(
                "dispatcher.invoke.skipped",
                device_id=device_id,
                method=method_name,
                connection_state=twin.connection_state.value,
            )
            return InvocationResult(
                device_id=device_id,
                method_name=method_name,
                outcome=InvocationOutcome.SKIPPED,
                message=f"Device is {twin.connection_state.value.lower()}",
                alert_id=alert_id,
            )

        payload = parameters.to_wire()
        if reason:
            payload["Reason"] = reason

        started = time.perf_counter()
        try:
            response = await self.registry_gateway.invoke_method(
                device_id,
                method_name,
                payload,
                timeout_seconds=self.direct_timeout_seconds,
            )
        except DeviceRegistryError as e:
            logger.error(
                "dispatcher.invoke.failed",
                device_id=device_id,
                method=method_name,
                reason=reason,
                error=e.message,
            )
            return InvocationResult(
                device_id=device_id,
                method_name=method_name,
                outcome=InvocationOutcome.FAILED,
                status_code=e.status_code,
                message=e.message,
                round_trip_ms=_elapsed_ms(started),
                alert_id=alert_id,
            )

        round_trip_ms = _elapsed_ms(started)
        reaction_ms = None
        if alert_id and alert_time is not None:
            reaction_ms = (self._clock() - alert_time).total_seconds() * 1000.0

        if response.status == SUCCESS_STATUS:
            logger.info(
                "dispatcher.invoke.succeeded",
                device_id=device_id,
                method=method_name,
                reason=reason,
                round_trip_ms=round(round_trip_ms, 1),
                alert_id=alert_id,
                reaction_ms=round(reaction_ms, 1) if reaction_ms is not None else None,
            )
            outcome = InvocationOutcome.SUCCEEDED
        else:
            logger.error(
                "dispatcher.invoke.rejected",
                device_id=device_id,
                method=method_name,
                status=response.status,
                reason=reason,
            )
            outcome = InvocationOutcome.FAILED

        return InvocationResult(
            device_id=device_id,
            method_name=method_name,
            outcome=outcome,
            status_code=response.status,
            message=reason,
            round_trip_ms=round_trip_ms,
            alert_id=alert_id,
            reaction_ms=reaction_ms,
        )

    async def execute(self, command: Command) -> InvocationResult:
        """
        Deliver a queued command to its device.

        Raises:
            DeviceRegistryError: If the registry call fails, so the queue
                redelivers the command
        """
        method_name = command.command_name.method_name
        started = time.perf_counter()
        response = await self.registry_gateway.invoke_method(
            command.device_id,
            method_name,
            command.payload(),
            timeout_seconds=self.queued_timeout_seconds,
        )
        round_trip_ms = _elapsed_ms(started)

        if response.status == SUCCESS_STATUS:
            logger.info(
                "dispatcher.execute.succeeded",
                device_id=command.device_id,
                method=method_name,
                sender_id=command.sender_id,
                round_trip_ms=round(round_trip_ms, 1),
            )
            outcome = InvocationOutcome.SUCCEEDED
        else:
            logger.warning(
                "dispatcher.execute.rejected",
                device_id=command.device_id,
                method=method_name,
                status=response.status,
                sender_id=command.sender_id,
            )
            outcome = InvocationOutcome.FAILED

        return InvocationResult(
            device_id=command.device_id,
            method_name=method_name,
            outcome=outcome,
            status_code=response.status,
            message=command.reason,
            round_trip_ms=round_trip_ms,
        )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0
