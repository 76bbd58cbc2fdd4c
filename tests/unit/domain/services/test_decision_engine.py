from __future__ import annotations

import pytest

from iiot_coordinator.domain.entities.alerts import (
    AlertType,
    CriticalErrorAlert,
    DeviceAlert,
    LineErrorAlert,
)
from iiot_coordinator.domain.entities.decision import (
    DeviceStatus,
    LineStatus,
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
from iiot_coordinator.domain.services.decision_engine import DecisionEngine

LINE1 = ("Press1", "Conveyor1", "QualityStation1", "Compressor1")


def _temperature_alert(temperature: float, device_id: str = "Press1") -> DeviceAlert:
    return DeviceAlert(
        device_id=device_id,
        line_id="Line1",
        alert_type=AlertType.TEMPERATURE,
        temperature=temperature,
    )


@pytest.mark.parametrize(
    ("temperature", "action", "urgency"),
    [
        (97.0, RecommendedAction.EMERGENCY_STOP, Urgency.CRITICAL),
        (95.01, RecommendedAction.EMERGENCY_STOP, Urgency.CRITICAL),
        (95.0, RecommendedAction.REDUCE_LOAD, Urgency.HIGH),
        (90.5, RecommendedAction.REDUCE_LOAD, Urgency.HIGH),
        (90.0, RecommendedAction.OPTIMIZE_LOAD, Urgency.MEDIUM),
        (85.5, RecommendedAction.OPTIMIZE_LOAD, Urgency.MEDIUM),
    ],
)
def test_temperature_rules(temperature, action, urgency) -> None:
    decision = DecisionEngine().classify(_temperature_alert(temperature), LINE1)

    assert decision.recommended_action is action
    assert decision.urgency is urgency


def test_temperature_band_between_90_and_95_reduces_load_on_whole_line() -> None:
    engine = DecisionEngine()
    for temperature in (90.1, 92.5, 95.0):
        decision = engine.classify(_temperature_alert(temperature), LINE1)
        assert decision.recommended_action is RecommendedAction.REDUCE_LOAD
        assert decision.urgency is Urgency.HIGH
        assert decision.parameters == LoadReduction(target_reduction=30)
        assert decision.affected_devices == LINE1


def test_emergency_temperature_only_targets_alerting_device() -> None:
    decision = DecisionEngine().classify(_temperature_alert(97.0), LINE1)

    assert decision.affected_devices == ("Press1",)
    assert decision.reason == "Critical temperature: 97.0°C"


def test_normal_temperature_has_no_action() -> None:
    decision = DecisionEngine().classify(_temperature_alert(70.0), LINE1)

    assert decision.recommended_action is None
    assert decision.urgency is Urgency.LOW
    assert decision.affected_devices == ()
    assert decision.has_action is False


def test_line_wide_action_falls_back_to_alerting_device_without_members() -> None:
    decision = DecisionEngine().classify(_temperature_alert(88.0), ())

    assert decision.recommended_action is RecommendedAction.OPTIMIZE_LOAD
    assert decision.affected_devices == ("Press1",)
    assert decision.parameters == LoadReduction(target_reduction=15)


def test_line_members_are_deduplicated_in_order() -> None:
    decision = DecisionEngine().classify(
        _temperature_alert(92.0), ("Press1", "Conveyor1", "Press1", "", "Compressor1")
    )

    assert decision.affected_devices == ("Press1", "Conveyor1", "Compressor1")


@pytest.mark.parametrize(
    ("count", "action", "urgency", "parameters"),
    [
        (6, RecommendedAction.STOP_AND_RESET, Urgency.HIGH, None),
        (5, RecommendedAction.COMPENSATE, Urgency.MEDIUM, Compensation(20)),
        (4, RecommendedAction.COMPENSATE, Urgency.MEDIUM, Compensation(20)),
        (3, RecommendedAction.RESET, Urgency.LOW, None),
        (1, RecommendedAction.RESET, Urgency.LOW, None),
    ],
)
def test_error_count_rules(count, action, urgency, parameters) -> None:
    alert = DeviceAlert(
        device_id="Conveyor1",
        line_id="Line1",
        alert_type=AlertType.ERROR,
        error_count=count,
    )
    decision = DecisionEngine().classify(alert, LINE1)

    assert decision.recommended_action is action
    assert decision.urgency is urgency
    if parameters is not None:
        assert decision.parameters == parameters
        assert decision.affected_devices == LINE1
    else:
        assert decision.affected_devices == ("Conveyor1",)


def test_zero_errors_have_no_action() -> None:
    alert = DeviceAlert(device_id="Conveyor1", line_id="Line1", alert_type=AlertType.ERROR)

    assert DecisionEngine().classify(alert).recommended_action is None


def test_production_rules() -> None:
    engine = DecisionEngine()

    def classify(rate: int):
        return engine.classify(
            DeviceAlert(
                device_id="Press1",
                line_id="Line1",
                alert_type=AlertType.PRODUCTION,
                production_rate=rate,
            ),
            LINE1,
        )

    very_low = classify(15)
    assert very_low.recommended_action is RecommendedAction.INVESTIGATE_AND_BOOST
    assert very_low.urgency is Urgency.HIGH
    assert very_low.parameters == ProductionBoost(boost_target=60)
    assert very_low.reason == "Very low production: 15 units/hr"

    low = classify(20)
    assert low.recommended_action is RecommendedAction.BALANCE
    assert low.parameters == BalanceTarget(balance_target=55)

    assert classify(40).recommended_action is None


def test_unknown_alert_type_has_no_action() -> None:
    alert = DeviceAlert(device_id="Press1", line_id="Line1", alert_type=None)

    decision = DecisionEngine().classify(alert)

    assert decision.recommended_action is None
    assert decision.alert_type is None


def test_device_specific_alert_for_unknown_type_monitors() -> None:
    alert = DeviceAlert(
        device_id="Robot7", line_id="Line1", alert_type=AlertType.DEVICE_SPECIFIC
    )

    decision = DecisionEngine().classify(alert)

    assert decision.recommended_action is RecommendedAction.MONITOR
    assert decision.urgency is Urgency.LOW
    assert decision.affected_devices == ("Robot7",)


def test_device_specific_alert_uses_evaluator_for_type() -> None:
    alert = DeviceAlert(
        device_id="Press1",
        line_id="Line1",
        alert_type=AlertType.DEVICE_SPECIFIC,
        device_type=DeviceType.PRESS,
        pressure=104.0,
    )

    decision = DecisionEngine().classify(alert, LINE1)

    assert decision.recommended_action is RecommendedAction.EMERGENCY_STOP
    assert decision.affected_devices == ("Press1",)


def _critical(**flags) -> CriticalErrorAlert:
    return CriticalErrorAlert(
        device_id="Conveyor2", line_id="Line2", device_error=42, error_priority=3, **flags
    )


def test_emergency_stop_flag_targets_every_line_member() -> None:
    members = ("Press2", "Conveyor2", "QualityStation2", "Compressor2")
    decision = DecisionEngine().classify(_critical(has_emergency_stop=True), members)

    assert decision.recommended_action is RecommendedAction.EMERGENCY_STOP
    assert decision.urgency is Urgency.CRITICAL
    assert set(decision.affected_devices) == set(members)
    assert decision.parameters == CriticalError(error_code=42, error_priority=3)


def test_power_failure_targets_line() -> None:
    decision = DecisionEngine().classify(
        _critical(has_power_failure=True), ("Press2", "Conveyor2")
    )

    assert decision.recommended_action is RecommendedAction.POWER_FAILURE_PROTOCOL
    assert decision.affected_devices == ("Press2", "Conveyor2")


@pytest.mark.parametrize(
    ("flags", "action", "reason"),
    [
        (
            {"has_sensor_failure": True},
            RecommendedAction.SENSOR_DIAGNOSTIC,
            "Sensor failure detected",
        ),
        (
            {"has_unknown_error": True},
            RecommendedAction.DIAGNOSTIC_SCAN,
            "Unknown error detected",
        ),
        ({}, RecommendedAction.IMMEDIATE_RESET, "Critical error code 42 requires immediate reset"),
    ],
)
def test_device_scoped_critical_rules(flags, action, reason) -> None:
    decision = DecisionEngine().classify(_critical(**flags), ("Press2", "Conveyor2"))

    assert decision.recommended_action is action
    assert decision.urgency is Urgency.HIGH
    assert decision.reason == reason
    assert decision.affected_devices == ("Conveyor2",)


def test_requires_line_members_only_for_line_wide_verdicts() -> None:
    engine = DecisionEngine()

    assert engine.requires_line_members(_critical(has_emergency_stop=True))
    assert not engine.requires_line_members(_critical(has_sensor_failure=True))
    assert engine.requires_line_members(_temperature_alert(92.0))
    assert not engine.requires_line_members(_temperature_alert(97.0))
    assert not engine.requires_line_members(_temperature_alert(50.0))
    assert engine.requires_line_members(
        LineErrorAlert(line_id="Line1", error_count=2)
    )


def test_line_alert_resets_every_member() -> None:
    alert = LineErrorAlert(
        line_id="Line1", error_count=6, max_error_code=909, avg_temperature=71.3
    )

    decision = DecisionEngine().classify(alert, LINE1)

    assert decision.recommended_action is RecommendedAction.IMMEDIATE_RESET
    assert decision.urgency is Urgency.HIGH
    assert decision.affected_devices == LINE1
    assert decision.alert_type is AlertType.LINE_ERROR
    assert decision.reason == (
        "Pattern detected: 6 errors in 1 minute, MaxErrorCode: 909, AvgTemp: 71.3°C"
    )
    assert decision.parameters == LineErrorPattern(6, 909, 71.3)


def test_line_alert_without_members_has_no_action() -> None:
    alert = LineErrorAlert(line_id="Line9", error_count=3, max_error_code=5)

    decision = DecisionEngine().classify_line_alert(alert, ())

    assert decision.recommended_action is None
    assert decision.reason.endswith("(no devices resolved for line)")


class TestOptimizeProductionLine:
    def test_bottleneck_drives_rates(self) -> None:
        statuses = [
            DeviceStatus("Press1", production_rate=60, max_production_rate=80),
            DeviceStatus("Conveyor1", production_rate=45, max_production_rate=80),
            DeviceStatus("QualityStation1", production_rate=70, max_production_rate=48),
        ]

        result = DecisionEngine().optimize_production_line("Line1", statuses)

        assert result.bottleneck_device == "Conveyor1"
        assert result.optimization_type == "BottleneckOptimized"
        assert result.device_adjustments == {
            "Press1": 45,
            "Conveyor1": 55,
            "QualityStation1": 48,
        }
        assert result.expected_throughput == 45.0

    def test_quality_weighting_picks_bottleneck(self) -> None:
        statuses = [
            DeviceStatus("Press1", production_rate=60, quality_percentage=50.0),
            DeviceStatus("Conveyor1", production_rate=45, quality_percentage=100.0),
        ]

        result = DecisionEngine().optimize_production_line("Line1", statuses)

        assert result.bottleneck_device == "Press1"
        assert result.device_adjustments == {"Press1": 70, "Conveyor1": 65}

    def test_first_minimal_device_wins_ties(self) -> None:
        statuses = [
            DeviceStatus("A", production_rate=30),
            DeviceStatus("B", production_rate=30),
        ]

        result = DecisionEngine().optimize_production_line("Line1", statuses)

        assert result.bottleneck_device == "A"

    def test_offline_devices_are_derated(self) -> None:
        statuses = [
            DeviceStatus("Press1", status="offline", max_production_rate=80, temperature=85),
            DeviceStatus(
                "Conveyor1", status="offline", max_production_rate=80, recent_error_count=2
            ),
            DeviceStatus(
                "Compressor1",
                status="offline",
                max_production_rate=80,
                temperature=90,
                recent_error_count=1,
            ),
        ]

        result = DecisionEngine().optimize_production_line("Line1", statuses)

        assert result.bottleneck_device is None
        assert result.optimization_type == "Balanced"
        assert result.device_adjustments == {
            "Press1": 72,
            "Conveyor1": 76,
            "Compressor1": 68,
        }
        assert result.expected_throughput == 68.0

    def test_optimization_is_idempotent_and_throughput_is_minimum(self) -> None:
        engine = DecisionEngine()
        statuses = [
            DeviceStatus("Press1", production_rate=62, max_production_rate=90),
            DeviceStatus("Conveyor1", production_rate=38, max_production_rate=90),
            DeviceStatus("QualityStation1", production_rate=55, max_production_rate=90),
            DeviceStatus("Compressor1", production_rate=71, max_production_rate=90),
        ]

        first = engine.optimize_production_line("Line1", statuses)
        second = engine.optimize_production_line("Line1", statuses)

        assert first.device_adjustments == second.device_adjustments
        assert first.bottleneck_device == second.bottleneck_device
        assert first.expected_throughput == min(first.device_adjustments.values())

    def test_empty_line(self) -> None:
        result = DecisionEngine().optimize_production_line("Line1", [])

        assert result.device_adjustments == {}
        assert result.expected_throughput == 0.0


class TestAnalyzePlantOptimization:
    def test_load_balance_energy_and_maintenance(self) -> None:
        lines = [
            LineStatus("Line1", utilization=95, energy_consumption=600, last_maintenance_hours=800),
            LineStatus("Line2", utilization=50, energy_consumption=300),
            LineStatus("Line3", utilization=88, energy_consumption=200),
        ]

        result = DecisionEngine().analyze_plant_optimization(lines)

        assert result.optimization_needed is True
        assert result.optimization_type == "LoadBalance"
        assert result.overloaded_lines == ["Line1", "Line3"]
        assert result.underutilized_lines == ["Line2"]
        assert result.recommended_actions == [
            "LoadBalance",
            "EnergyOptimize",
            "ScheduleMaintenance",
        ]
        assert result.maintenance_required == ["Line1"]

    def test_balanced_plant_needs_nothing(self) -> None:
        lines = [
            LineStatus("Line1", utilization=70, energy_consumption=100),
            LineStatus("Line2", utilization=75, energy_consumption=100),
        ]

        result = DecisionEngine().analyze_plant_optimization(lines)

        assert result.optimization_needed is False
        assert result.recommended_actions == []

    def test_empty_plant(self) -> None:
        result = DecisionEngine().analyze_plant_optimization([])

        assert result.optimization_needed is False
        assert result.plant_id == "MainPlant"
