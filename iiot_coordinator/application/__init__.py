"""
Application Layer Package

Use cases orchestrating the domain services and ports, and the DTOs used on
the message channels and the HTTP API.
"""

from iiot_coordinator.application import dtos, use_cases

__all__ = ["dtos", "use_cases"]
