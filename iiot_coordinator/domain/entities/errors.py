"""
Domain Errors

This module defines custom error classes for domain-specific exceptions.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UnknownDeviceTypeError(DomainError):
    """Raised when a device identifier cannot be mapped to a device type."""

    def __init__(self, device_id: str, details: Optional[Dict[str, Any]] = None):
        self.device_id = device_id
        message = f"Cannot determine device type for {device_id}"
        super().__init__(message, details)


class DeviceRegistryError(DomainError):
    """Raised when the device registry cannot be reached or rejects a call."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        super().__init__(message, details)


class DeviceNotFoundError(DeviceRegistryError):
    """Raised when the registry has no twin for the requested device."""

    def __init__(self, device_id: str, details: Optional[Dict[str, Any]] = None):
        self.device_id = device_id
        super().__init__(
            f"Device {device_id} not found in registry", status_code=404, details=details
        )


class InvalidAlertError(DomainError):
    """Raised when an alert payload is structurally valid but unusable."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class InvalidCommandError(DomainError):
    """Raised when a command name is outside the device command vocabulary."""

    def __init__(self, command: str, details: Optional[Dict[str, Any]] = None):
        self.command = command
        super().__init__(f"Unknown device command: {command}", details)
