"""
Main Application - Main Layer

Entry point of the FastAPI application exposing the operational endpoints.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iiot_coordinator.main.config import get_settings
from iiot_coordinator.main.container import app_lifespan, init_container
from iiot_coordinator.presentation.controllers import (
    devices_router,
    directory_router,
    optimization_router,
    system_router,
)
from iiot_coordinator.shared import (
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

# Basic logging first so configuration loading is logged too
configure_logging()

settings = get_settings()
update_logging_from_settings(settings)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.started_at = datetime.now(timezone.utc)
    logger.info("Application starting up")

    async with app_lifespan() as container:
        app.state.container = container
        yield

    logger.info("Application shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application
    """
    settings = get_settings()

    init_container(settings)

    app = FastAPI(
        title=settings.service.title,
        description=settings.service.description,
        version=settings.service.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system_router)
    app.include_router(devices_router)
    app.include_router(directory_router)
    app.include_router(optimization_router)

    return app


app = create_app()
