"""Celery task implementations for infrastructure services."""

from .alerts import process_critical_alert, process_device_alert, process_line_alert
from .base import CallbackTask, logger
from .commands import execute_device_command
from .coordination import coordinate_line

__all__ = [
    "CallbackTask",
    "coordinate_line",
    "execute_device_command",
    "logger",
    "process_critical_alert",
    "process_device_alert",
    "process_line_alert",
]
