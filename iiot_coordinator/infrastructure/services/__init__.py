"""Infrastructure services package."""

from . import tasks
from .celery_config import celery_app
from .command_channel import CeleryCommandChannel
from .health_check_service import HealthCheckService
from .health_monitor_runner import HealthMonitorRunner

__all__ = [
    "celery_app",
    "tasks",
    "CeleryCommandChannel",
    "HealthCheckService",
    "HealthMonitorRunner",
]
