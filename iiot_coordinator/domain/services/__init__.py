"""Pure domain services: alert classification and health-state derivation."""

from .decision_engine import DecisionEngine, DecisionThresholds
from .device_classifier import (
    canonical_line_devices,
    classify_device_type,
    extract_line_number,
    infer_device_type,
)
from .device_evaluators import DEFAULT_EVALUATORS, DeviceEvaluator, Scope, Verdict
from .health_state import HealthThresholds, derive_health_state, describe_health_state

__all__ = [
    "DEFAULT_EVALUATORS",
    "DecisionEngine",
    "DecisionThresholds",
    "DeviceEvaluator",
    "HealthThresholds",
    "Scope",
    "Verdict",
    "canonical_line_devices",
    "classify_device_type",
    "derive_health_state",
    "describe_health_state",
    "extract_line_number",
    "infer_device_type",
]
