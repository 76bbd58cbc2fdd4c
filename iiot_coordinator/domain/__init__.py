"""
Domain Layer Package

Entities, ports and the pure decision and health-state services. Nothing in
this package performs I/O or depends on a framework.
"""

from iiot_coordinator.domain import entities, gateways, ports, repositories, services

__all__ = ["entities", "gateways", "ports", "repositories", "services"]
