"""
Shared module - Cross-cutting concerns / Shared Layer

Constants, logging helpers and the generic TTL cache used by more than one
layer of the coordinator. Nothing in here depends on Domain, Application or
Infrastructure code.
"""

from .consts import EnumChannel, EnumEnvironment, EnumLogLevel
from .logging import (
    bind_message_context,
    configure_logging,
    get_logger,
    update_logging_from_settings,
)
from .ttl_cache import TTLCache

__all__ = [
    "EnumChannel",
    "EnumEnvironment",
    "EnumLogLevel",
    "TTLCache",
    "bind_message_context",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
