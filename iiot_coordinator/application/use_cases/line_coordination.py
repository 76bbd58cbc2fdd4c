"""
Line Coordination Router - Application Layer

Expands line-scoped actions received on ``line-coordination`` into
production-rate, reset and stop commands for every affected device.
"""

from datetime import datetime, timezone
from typing import Callable, List

from iiot_coordinator.application.use_cases.command_dispatcher import CommandDispatcher
from iiot_coordinator.domain.entities.commands import (
    MAX_PRIORITY,
    Command,
    CommandName,
    LineActionKind,
    LineCoordinationAction,
    SenderId,
)
from iiot_coordinator.domain.entities.parameters import (
    BalanceRequest,
    LineStop,
    OptimizeMode,
    OptimizeRequest,
    RateTarget,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

OVERHEATING_DEVICE_RATE = 40
OVERHEATING_COMPENSATION_RATE = 65
PROBLEMATIC_DEVICE_RATE = 45
PROBLEMATIC_COMPENSATION_RATE = 70
BALANCE_STEP = 15
BALANCE_OFFSET = 5


class LineCoordinationRouter:
    """Computes per-device commands for line actions and publishes them."""

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.dispatcher = dispatcher
        self._clock = clock

    def route(self, action: LineCoordinationAction) -> List[Command]:
        """Commands for a line action; empty for unknown kinds or modes."""
        if action.kind == LineActionKind.EMERGENCY_STOP:
            return self._emergency_stop(action)
        if action.kind == LineActionKind.OPTIMIZE:
            return self._optimize(action)
        if action.kind == LineActionKind.BALANCE:
            return self._balance(action)
        if action.kind == LineActionKind.RESET:
            return self._reset(action)

        logger.warning(
            "coordination.unknown_action",
            line_id=action.line_id,
            action=action.raw_kind,
        )
        return []

    async def coordinate(self, action: LineCoordinationAction) -> List[Command]:
        logger.info(
            "coordination.received",
            line_id=action.line_id,
            action=action.kind.value if action.kind else action.raw_kind,
            devices=list(action.affected_devices),
            reason=action.reason,
        )
        commands = self.route(action)
        await self.dispatcher.publish(commands)
        return commands

    def _emergency_stop(self, action: LineCoordinationAction) -> List[Command]:
        logger.warning(
            "coordination.emergency_stop",
            line_id=action.line_id,
            devices=list(action.affected_devices),
        )
        stop = LineStop(line_id=action.line_id, timestamp=self._clock())
        return [
            Command(
                device_id=device_id,
                command_name=CommandName.EMERGENCY_STOP,
                sender_id=SenderId.LINE_COORDINATION.value,
                reason=action.reason,
                parameters=stop,
                priority=MAX_PRIORITY,
                line_id=action.line_id,
            )
            for device_id in action.affected_devices
        ]

    def _optimize(self, action: LineCoordinationAction) -> List[Command]:
        request = action.parameters
        if not isinstance(request, OptimizeRequest):
            logger.warning(
                "coordination.unknown_optimize_mode",
                line_id=action.line_id,
                parameters=action.parameters.to_wire(),
            )
            return []

        commands = []
        for device_id in action.affected_devices:
            is_focus = device_id == request.focus_device
            if request.mode == OptimizeMode.REDUCE_LOAD:
                command_name = CommandName.ADJUST_PRODUCTION_RATE
                if is_focus:
                    rate = OVERHEATING_DEVICE_RATE
                    reason = f"Reducing load due to temperature: {request.temperature}°C"
                else:
                    rate = OVERHEATING_COMPENSATION_RATE
                    reason = f"Compensating for overheating device {request.focus_device}"
            else:
                if is_focus:
                    command_name = CommandName.REDUCE_RATE
                    rate = PROBLEMATIC_DEVICE_RATE
                else:
                    command_name = CommandName.ADJUST_PRODUCTION_RATE
                    rate = PROBLEMATIC_COMPENSATION_RATE
                reason = (
                    f"Compensating for device {request.focus_device} "
                    f"with {request.error_count} errors"
                )
            commands.append(
                Command(
                    device_id=device_id,
                    command_name=command_name,
                    sender_id=SenderId.LINE_OPTIMIZATION.value,
                    reason=reason,
                    parameters=RateTarget(target_rate=rate),
                    line_id=action.line_id,
                )
            )
        return commands

    def _balance(self, action: LineCoordinationAction) -> List[Command]:
        request = action.parameters
        if not isinstance(request, BalanceRequest):
            request = BalanceRequest(slow_device="")

        commands = []
        for device_id in action.affected_devices:
            if device_id == request.slow_device:
                rate = min(request.target_rate, request.current_rate + BALANCE_STEP)
                reason = "Boosting slow device for line balance"
            else:
                rate = request.target_rate - BALANCE_OFFSET
                reason = (
                    f"Adjusting for line balance due to slow device {request.slow_device}"
                )
            commands.append(
                Command(
                    device_id=device_id,
                    command_name=CommandName.ADJUST_PRODUCTION_RATE,
                    sender_id=SenderId.LINE_BALANCING.value,
                    reason=reason,
                    parameters=RateTarget(target_rate=rate),
                    line_id=action.line_id,
                )
            )
        return commands

    def _reset(self, action: LineCoordinationAction) -> List[Command]:
        return [
            Command(
                device_id=device_id,
                command_name=CommandName.RESET,
                sender_id=SenderId.LINE_RESET.value,
                reason=action.reason,
                line_id=action.line_id,
            )
            for device_id in action.affected_devices
        ]
