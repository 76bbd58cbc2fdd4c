from enum import Enum


class EnumEnvironment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class EnumLogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnumChannel(str, Enum):
    """Logical message channels shared by the worker and the publishers."""

    DEVICE_ALERTS = "device-alerts"
    CRITICAL_ALERTS = "critical-alerts"
    LINE_ALERTS = "line-alerts"
    LINE_COORDINATION = "line-coordination"
    DEVICE_COMMANDS = "device-commands"
