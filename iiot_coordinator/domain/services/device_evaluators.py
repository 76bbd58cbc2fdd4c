"""
Device-specific alert evaluation.

One evaluator per device type; the decision engine picks the evaluator for
the alert's device type and turns its verdict into a decision.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from iiot_coordinator.domain.entities.alerts import DeviceAlert
from iiot_coordinator.domain.entities.decision import RecommendedAction, Urgency
from iiot_coordinator.domain.entities.device import DeviceType
from iiot_coordinator.domain.entities.parameters import (
    NO_PARAMETERS,
    ActionParameters,
    CompressorReadings,
    PassRateTarget,
    PressureTarget,
    SpeedTarget,
)


class Scope(str, Enum):
    """Which devices a verdict applies to."""

    DEVICE = "device"
    LINE = "line"


@dataclass(frozen=True, slots=True)
class Verdict:
    action: RecommendedAction
    urgency: Urgency
    reason: str
    scope: Scope = Scope.DEVICE
    parameters: ActionParameters = NO_PARAMETERS


class DeviceEvaluator(ABC):
    """Evaluates the device-specific readings carried by an alert."""

    device_type: DeviceType

    @abstractmethod
    def evaluate(self, alert: DeviceAlert) -> Optional[Verdict]:
        """Return a verdict, or None when the readings are within limits."""


class PressEvaluator(DeviceEvaluator):
    device_type = DeviceType.PRESS

    EMERGENCY_PRESSURE = 100.0
    HIGH_PRESSURE = 85.0
    TARGET_PRESSURE = 75.0

    def evaluate(self, alert: DeviceAlert) -> Optional[Verdict]:
        pressure = alert.pressure
        if pressure is None:
            return None
        if pressure > self.EMERGENCY_PRESSURE:
            return Verdict(
                RecommendedAction.EMERGENCY_STOP,
                Urgency.CRITICAL,
                f"Critical press pressure: {pressure} bar",
            )
        if pressure > self.HIGH_PRESSURE:
            return Verdict(
                RecommendedAction.REDUCE_PRESSURE,
                Urgency.HIGH,
                f"High press pressure: {pressure} bar",
                parameters=PressureTarget(target_pressure=self.TARGET_PRESSURE),
            )
        return None


class ConveyorEvaluator(DeviceEvaluator):
    device_type = DeviceType.CONVEYOR

    MIN_SPEED = 10.0
    MAX_SPEED = 50.0
    SLOW_TARGET = 20.0
    FAST_TARGET = 40.0

    def evaluate(self, alert: DeviceAlert) -> Optional[Verdict]:
        speed = alert.speed
        if speed is None:
            return None
        if speed < self.MIN_SPEED:
            return Verdict(
                RecommendedAction.ADJUST_SPEED,
                Urgency.MEDIUM,
                f"Conveyor speed too low: {speed}",
                parameters=SpeedTarget(target_speed=self.SLOW_TARGET),
            )
        if speed > self.MAX_SPEED:
            return Verdict(
                RecommendedAction.REDUCE_SPEED,
                Urgency.HIGH,
                f"Conveyor speed too high: {speed}",
                parameters=SpeedTarget(target_speed=self.FAST_TARGET),
            )
        return None


class QualityStationEvaluator(DeviceEvaluator):
    device_type = DeviceType.QUALITY_STATION

    CRITICAL_PASS_RATE = 70.0
    LOW_PASS_RATE = 90.0
    TARGET_PASS_RATE = 95.0

    def evaluate(self, alert: DeviceAlert) -> Optional[Verdict]:
        pass_rate = self._pass_rate(alert)
        if pass_rate is None:
            return None
        target = PassRateTarget(target_pass_rate=self.TARGET_PASS_RATE)
        if pass_rate < self.CRITICAL_PASS_RATE:
            return Verdict(
                RecommendedAction.QUALITY_INVESTIGATION,
                Urgency.HIGH,
                f"Critical pass rate: {pass_rate:.1f}%",
                scope=Scope.LINE,
                parameters=target,
            )
        if pass_rate < self.LOW_PASS_RATE:
            return Verdict(
                RecommendedAction.QUALITY_ADJUSTMENT,
                Urgency.MEDIUM,
                f"Low pass rate: {pass_rate:.1f}%",
                parameters=target,
            )
        return None

    @staticmethod
    def _pass_rate(alert: DeviceAlert) -> Optional[float]:
        if alert.pass_rate is not None:
            return alert.pass_rate
        if alert.good_count is None or alert.bad_count is None:
            return None
        inspected = alert.good_count + alert.bad_count
        if inspected <= 0:
            return None
        return alert.good_count / inspected * 100.0


class CompressorEvaluator(DeviceEvaluator):
    device_type = DeviceType.COMPRESSOR

    MAX_PRESSURE_DROP = 20.0
    MIN_OUTPUT_PRESSURE = 80.0
    TARGET_PRESSURE = 90.0

    def evaluate(self, alert: DeviceAlert) -> Optional[Verdict]:
        system_pressure = alert.system_air_pressure
        output_pressure = alert.output_pressure
        if output_pressure is None:
            return None
        if (
            system_pressure is not None
            and system_pressure - output_pressure > self.MAX_PRESSURE_DROP
        ):
            return Verdict(
                RecommendedAction.COMPRESSOR_MAINTENANCE,
                Urgency.HIGH,
                f"Pressure drop across compressor: "
                f"{system_pressure - output_pressure:.1f} bar",
                parameters=CompressorReadings(
                    system_air_pressure=system_pressure,
                    output_pressure=output_pressure,
                ),
            )
        if output_pressure < self.MIN_OUTPUT_PRESSURE:
            return Verdict(
                RecommendedAction.INCREASE_COMPRESSION,
                Urgency.MEDIUM,
                f"Low output pressure: {output_pressure} bar",
                parameters=PressureTarget(target_pressure=self.TARGET_PRESSURE),
            )
        return None


DEFAULT_EVALUATORS: Dict[DeviceType, DeviceEvaluator] = {
    evaluator.device_type: evaluator
    for evaluator in (
        PressEvaluator(),
        ConveyorEvaluator(),
        QualityStationEvaluator(),
        CompressorEvaluator(),
    )
}
