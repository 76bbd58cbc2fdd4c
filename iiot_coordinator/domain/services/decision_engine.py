"""
Decision Engine

Rule-based classification of alerts into remediation decisions, plus the
line and plant optimisation analyses. Everything here is a pure function of
its arguments and the configured thresholds; membership and device type are
resolved by the caller and passed in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

from iiot_coordinator.domain.entities.alerts import (
    Alert,
    AlertType,
    CriticalErrorAlert,
    DeviceAlert,
    LineErrorAlert,
)
from iiot_coordinator.domain.entities.decision import (
    Decision,
    DeviceStatus,
    LineOptimizationResult,
    LineStatus,
    PlantOptimizationResult,
    RecommendedAction,
    Urgency,
)
from iiot_coordinator.domain.entities.device import DeviceType
from iiot_coordinator.domain.entities.parameters import (
    BalanceTarget,
    Compensation,
    CriticalError,
    LineErrorPattern,
    LoadReduction,
    ProductionBoost,
)
from iiot_coordinator.domain.services.device_evaluators import (
    DEFAULT_EVALUATORS,
    DeviceEvaluator,
    Scope,
    Verdict,
)


@dataclass(frozen=True)
class DecisionThresholds:
    """Named thresholds of the generic alert rules."""

    emergency_temperature: float = 95.0
    high_temperature: float = 90.0
    elevated_temperature: float = 85.0
    high_load_reduction: int = 30
    elevated_load_reduction: int = 15

    critical_error_count: int = 5
    high_error_count: int = 3
    compensation_rate: int = 20

    very_low_production: int = 20
    low_production: int = 40
    boost_target: int = 60
    balance_target: int = 55

    # Line optimisation
    hot_device_temperature: float = 80.0
    hot_device_factor: float = 0.9
    erroring_device_factor: float = 0.95
    bottleneck_boost: int = 10
    downstream_headroom: int = 5

    # Plant analysis
    utilization_spread: float = 30.0
    utilization_band: float = 10.0
    energy_budget: float = 1000.0
    maintenance_interval_hours: int = 720


class DecisionEngine:
    """Stateless alert classifier; safe to share between concurrent handlers."""

    def __init__(
        self,
        thresholds: Optional[DecisionThresholds] = None,
        evaluators: Optional[Mapping[DeviceType, DeviceEvaluator]] = None,
    ):
        self.thresholds = thresholds or DecisionThresholds()
        self._evaluators = dict(evaluators or DEFAULT_EVALUATORS)

    def classify(self, alert: Alert, line_members: Sequence[str] = ()) -> Decision:
        """
        Classify an alert into a decision.

        Args:
            alert: Device, critical or line alert
            line_members: Resolved membership of the alert's line, used for
                line-wide actions

        Returns:
            Decision; ``recommended_action`` is None when no rule matched
        """
        if isinstance(alert, LineErrorAlert):
            return self.classify_line_alert(alert, line_members)
        if isinstance(alert, CriticalErrorAlert):
            verdict = self._evaluate_critical(alert)
            return self._decide(
                alert.device_id,
                alert.line_id,
                AlertType.CRITICAL,
                alert.error_priority,
                alert.alert_id,
                verdict,
                line_members,
            )

        verdict = self._evaluate_device_alert(alert)
        return self._decide(
            alert.device_id,
            alert.line_id,
            alert.alert_type,
            alert.priority,
            alert.alert_id,
            verdict,
            line_members,
        )

    def requires_line_members(self, alert: Alert) -> bool:
        """True when classifying the alert yields a line-wide action."""
        if isinstance(alert, LineErrorAlert):
            return True
        if isinstance(alert, CriticalErrorAlert):
            verdict = self._evaluate_critical(alert)
        else:
            verdict = self._evaluate_device_alert(alert)
        return verdict is not None and verdict.scope == Scope.LINE

    def classify_line_alert(
        self, alert: LineErrorAlert, line_members: Sequence[str]
    ) -> Decision:
        """Every member of a line with an error pattern gets an immediate reset."""
        members = _unique(line_members)
        reason = (
            f"Pattern detected: {alert.error_count} errors in 1 minute, "
            f"MaxErrorCode: {alert.max_error_code}, "
            f"AvgTemp: {alert.avg_temperature:.1f}°C"
        )
        if not members:
            return Decision(
                device_id=alert.line_id,
                line_id=alert.line_id,
                alert_type=AlertType.LINE_ERROR,
                priority=alert.priority,
                reason=f"{reason} (no devices resolved for line)",
                alert_id=alert.alert_id,
            )
        return Decision(
            device_id=alert.line_id,
            line_id=alert.line_id,
            alert_type=AlertType.LINE_ERROR,
            priority=alert.priority,
            recommended_action=RecommendedAction.IMMEDIATE_RESET,
            urgency=Urgency.HIGH,
            reason=reason,
            affected_devices=members,
            parameters=LineErrorPattern(
                error_count=alert.error_count,
                max_error_code=alert.max_error_code,
                avg_temperature=alert.avg_temperature,
            ),
            alert_id=alert.alert_id,
        )

    def optimize_production_line(
        self, line_id: str, device_statuses: Sequence[DeviceStatus]
    ) -> LineOptimizationResult:
        """
        Compute per-device production-rate targets around the line bottleneck.

        ``device_statuses`` must be supplied in physical line order: devices
        ahead of the bottleneck are capped at its rate and devices after it
        get a small headroom above it.
        """
        t = self.thresholds
        result = LineOptimizationResult(line_id=line_id)
        if not device_statuses:
            return result

        online = [
            (index, status)
            for index, status in enumerate(device_statuses)
            if status.is_online
        ]
        if online:
            bottleneck_index, bottleneck = min(
                online, key=lambda item: item[1].effective_rate
            )
            result.bottleneck_device = bottleneck.device_id
            result.optimization_type = "BottleneckOptimized"
            bottleneck_rate = bottleneck.production_rate
            for index, status in enumerate(device_statuses):
                if index < bottleneck_index:
                    target = bottleneck_rate
                elif index == bottleneck_index:
                    target = bottleneck_rate + t.bottleneck_boost
                else:
                    target = bottleneck_rate + t.downstream_headroom
                result.device_adjustments[status.device_id] = min(
                    status.max_production_rate, target
                )
        else:
            for status in device_statuses:
                temperature_factor = (
                    t.hot_device_factor
                    if status.temperature > t.hot_device_temperature
                    else 1.0
                )
                error_factor = (
                    t.erroring_device_factor if status.recent_error_count > 0 else 1.0
                )
                result.device_adjustments[status.device_id] = int(
                    status.max_production_rate * temperature_factor * error_factor
                )

        result.expected_throughput = float(min(result.device_adjustments.values()))
        return result

    def analyze_plant_optimization(
        self, line_statuses: Sequence[LineStatus]
    ) -> PlantOptimizationResult:
        """Plant-wide load balance, energy and maintenance analysis."""
        t = self.thresholds
        result = PlantOptimizationResult()
        if not line_statuses:
            return result

        utilizations = [line.utilization for line in line_statuses]
        max_util, min_util = max(utilizations), min(utilizations)
        if max_util - min_util > t.utilization_spread:
            result.optimization_needed = True
            result.optimization_type = "LoadBalance"
            for line in line_statuses:
                if line.utilization > max_util - t.utilization_band:
                    result.overloaded_lines.append(line.line_id)
                elif line.utilization < min_util + t.utilization_band:
                    result.underutilized_lines.append(line.line_id)
            result.recommended_actions.append("LoadBalance")

        total_energy = sum(line.energy_consumption for line in line_statuses)
        if total_energy > t.energy_budget:
            result.optimization_needed = True
            result.recommended_actions.append("EnergyOptimize")

        for line in line_statuses:
            if line.last_maintenance_hours > t.maintenance_interval_hours:
                result.maintenance_required.append(line.line_id)
        if result.maintenance_required:
            result.optimization_needed = True
            result.recommended_actions.append("ScheduleMaintenance")

        return result

    # Rules

    def _evaluate_critical(self, alert: CriticalErrorAlert) -> Verdict:
        parameters = CriticalError(
            error_code=alert.device_error, error_priority=alert.error_priority
        )
        if alert.has_emergency_stop:
            return Verdict(
                RecommendedAction.EMERGENCY_STOP,
                Urgency.CRITICAL,
                "Emergency stop detected",
                Scope.LINE,
                parameters,
            )
        if alert.has_power_failure:
            return Verdict(
                RecommendedAction.POWER_FAILURE_PROTOCOL,
                Urgency.CRITICAL,
                "Power failure detected",
                Scope.LINE,
                parameters,
            )
        if alert.has_sensor_failure:
            return Verdict(
                RecommendedAction.SENSOR_DIAGNOSTIC,
                Urgency.HIGH,
                "Sensor failure detected",
                parameters=parameters,
            )
        if alert.has_unknown_error:
            return Verdict(
                RecommendedAction.DIAGNOSTIC_SCAN,
                Urgency.HIGH,
                "Unknown error detected",
                parameters=parameters,
            )
        return Verdict(
            RecommendedAction.IMMEDIATE_RESET,
            Urgency.HIGH,
            f"Critical error code {alert.device_error} requires immediate reset",
            parameters=parameters,
        )

    def _evaluate_device_alert(self, alert: DeviceAlert) -> Optional[Verdict]:
        if alert.alert_type == AlertType.TEMPERATURE:
            return self._evaluate_temperature(alert.temperature)
        if alert.alert_type == AlertType.ERROR:
            return self._evaluate_errors(alert.error_count)
        if alert.alert_type == AlertType.PRODUCTION:
            return self._evaluate_production(alert.production_rate)
        if alert.alert_type == AlertType.DEVICE_SPECIFIC:
            evaluator = self._evaluators.get(alert.device_type)
            if evaluator is None:
                return Verdict(
                    RecommendedAction.MONITOR,
                    Urgency.LOW,
                    f"No device-specific rules for device type {alert.device_type}",
                )
            return evaluator.evaluate(alert)
        return None

    def _evaluate_temperature(self, temperature: float) -> Optional[Verdict]:
        t = self.thresholds
        if temperature > t.emergency_temperature:
            return Verdict(
                RecommendedAction.EMERGENCY_STOP,
                Urgency.CRITICAL,
                f"Critical temperature: {temperature}°C",
            )
        if temperature > t.high_temperature:
            return Verdict(
                RecommendedAction.REDUCE_LOAD,
                Urgency.HIGH,
                f"High temperature: {temperature}°C",
                Scope.LINE,
                LoadReduction(target_reduction=t.high_load_reduction),
            )
        if temperature > t.elevated_temperature:
            return Verdict(
                RecommendedAction.OPTIMIZE_LOAD,
                Urgency.MEDIUM,
                f"Elevated temperature: {temperature}°C",
                Scope.LINE,
                LoadReduction(target_reduction=t.elevated_load_reduction),
            )
        return None

    def _evaluate_errors(self, error_count: int) -> Optional[Verdict]:
        t = self.thresholds
        if error_count > t.critical_error_count:
            return Verdict(
                RecommendedAction.STOP_AND_RESET,
                Urgency.HIGH,
                f"Critical error count: {error_count}",
            )
        if error_count > t.high_error_count:
            return Verdict(
                RecommendedAction.COMPENSATE,
                Urgency.MEDIUM,
                f"High error count: {error_count}",
                Scope.LINE,
                Compensation(compensation_rate=t.compensation_rate),
            )
        if error_count > 0:
            return Verdict(
                RecommendedAction.RESET, Urgency.LOW, f"Minor errors: {error_count}"
            )
        return None

    def _evaluate_production(self, production_rate: int) -> Optional[Verdict]:
        t = self.thresholds
        if production_rate < t.very_low_production:
            return Verdict(
                RecommendedAction.INVESTIGATE_AND_BOOST,
                Urgency.HIGH,
                f"Very low production: {production_rate} units/hr",
                Scope.LINE,
                ProductionBoost(boost_target=t.boost_target),
            )
        if production_rate < t.low_production:
            return Verdict(
                RecommendedAction.BALANCE,
                Urgency.MEDIUM,
                f"Low production: {production_rate} units/hr",
                Scope.LINE,
                BalanceTarget(balance_target=t.balance_target),
            )
        return None

    @staticmethod
    def _decide(
        device_id: str,
        line_id: str,
        alert_type: Optional[AlertType],
        priority: int,
        alert_id: Optional[str],
        verdict: Optional[Verdict],
        line_members: Sequence[str],
    ) -> Decision:
        if verdict is None:
            return Decision(
                device_id=device_id,
                line_id=line_id,
                alert_type=alert_type,
                priority=priority,
                alert_id=alert_id,
            )

        if verdict.scope == Scope.LINE:
            affected = _unique(line_members) or (device_id,)
        else:
            affected = (device_id,)
        return Decision(
            device_id=device_id,
            line_id=line_id,
            alert_type=alert_type,
            priority=priority,
            recommended_action=verdict.action,
            urgency=verdict.urgency,
            reason=verdict.reason,
            affected_devices=affected,
            parameters=verdict.parameters,
            alert_id=alert_id,
        )


def _unique(device_ids: Sequence[str]) -> Tuple[str, ...]:
    seen: Dict[str, None] = {}
    for device_id in device_ids:
        if device_id:
            seen.setdefault(device_id, None)
    return tuple(seen)
