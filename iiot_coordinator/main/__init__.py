"""
Main module - Composition Root Layer

Settings, the dependency container and the process entry points: the
FastAPI app (``main.app``), the Celery worker (``main.worker``) and the
health monitor loop (``main.monitor``).
"""

from .config import AppSettings, get_settings
from .container import AppContainer, get_container, init_container

__all__ = [
    "AppSettings",
    "get_settings",
    "AppContainer",
    "init_container",
    "get_container",
]
