"""
Controllers Package - Presentation Layer

FastAPI routers mapping HTTP requests onto application use cases.
"""

from .devices_controller import router as devices_router
from .directory_controller import router as directory_router
from .optimization_controller import router as optimization_router
from .system_controller import router as system_router

__all__ = ["devices_router", "directory_router", "optimization_router", "system_router"]
