"""
Dependency container injection module - Main Layer

Composition root shared by the API, the Celery worker and the health
monitor process.
"""

from contextlib import asynccontextmanager
from datetime import timedelta

from dependency_injector import containers, providers

from iiot_coordinator.application.use_cases.alert_use_cases import (
    ProcessCriticalAlertUseCase,
    ProcessDeviceAlertUseCase,
    ProcessLineAlertUseCase,
)
from iiot_coordinator.application.use_cases.command_dispatcher import CommandDispatcher
from iiot_coordinator.application.use_cases.device_directory import DeviceDirectory
from iiot_coordinator.application.use_cases.device_use_cases import (
    ExecuteQueuedCommandUseCase,
    GetDeviceMetadataUseCase,
    GetLineMembersUseCase,
    InvalidateDirectoryUseCase,
    QueueDeviceCommandUseCase,
    UpdateDeviceTwinUseCase,
)
from iiot_coordinator.application.use_cases.health_monitor import HealthStateMonitor
from iiot_coordinator.application.use_cases.health_use_cases import (
    GetHealthStatusUseCase,
)
from iiot_coordinator.application.use_cases.line_coordination import (
    LineCoordinationRouter,
)
from iiot_coordinator.application.use_cases.optimization_use_cases import (
    AnalyzePlantOptimizationUseCase,
    OptimizeProductionLineUseCase,
)
from iiot_coordinator.domain.services.decision_engine import DecisionEngine
from iiot_coordinator.domain.services.health_state import HealthThresholds
from iiot_coordinator.infrastructure.database import MongoDatabase
from iiot_coordinator.infrastructure.gateways import DeviceRegistryGateway
from iiot_coordinator.infrastructure.repositories import (
    StatusChangeRepository,
    TelemetryRepository,
)
from iiot_coordinator.infrastructure.services.celery_config import celery_app
from iiot_coordinator.infrastructure.services.command_channel import (
    CeleryCommandChannel,
)
from iiot_coordinator.infrastructure.services.health_check_service import (
    HealthCheckService,
)
from iiot_coordinator.infrastructure.services.health_monitor_runner import (
    HealthMonitorRunner,
)
from iiot_coordinator.shared import get_logger

from .config import AppSettings

logger = get_logger(__name__)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependency-injector."""

    wiring_config = containers.WiringConfiguration(packages=["..presentation"])

    # Settings
    config = providers.Configuration()

    # Infrastructure
    mongo_database = providers.Singleton(
        MongoDatabase,
        mongo_uri=config.database.mongo_uri,
        db_name=config.database.database_name,
    )

    status_change_repository = providers.Singleton(
        StatusChangeRepository,
        database=mongo_database,
    )

    telemetry_repository = providers.Singleton(
        TelemetryRepository,
        database=mongo_database,
    )

    registry_gateway = providers.Singleton(
        DeviceRegistryGateway,
        registry_url=config.registry.url,
        api_key=config.registry.api_key,
        timeout=config.registry.timeout_seconds,
    )

    command_channel = providers.Singleton(
        CeleryCommandChannel,
        celery_app=providers.Object(celery_app),
    )

    health_check_service = providers.Singleton(
        HealthCheckService,
        mongo_database=mongo_database,
        broker_url=config.celery.broker_url,
        redis_url=config.celery.result_backend_url,
        registry_url=config.registry.url,
    )

    # Core services
    decision_engine = providers.Singleton(DecisionEngine)

    device_directory = providers.Singleton(
        DeviceDirectory,
        registry_gateway=registry_gateway,
        cache_ttl=providers.Factory(
            timedelta, minutes=config.directory.cache_ttl_minutes
        ),
        primary_line_id=config.directory.primary_line_id,
        primary_line_name=config.directory.primary_line_name,
    )

    command_dispatcher = providers.Singleton(
        CommandDispatcher,
        registry_gateway=registry_gateway,
        command_channel=command_channel,
        direct_timeout_seconds=config.registry.direct_method_timeout_seconds,
        queued_timeout_seconds=config.registry.queued_command_timeout_seconds,
    )

    line_coordination_router = providers.Singleton(
        LineCoordinationRouter,
        dispatcher=command_dispatcher,
    )

    health_state_monitor = providers.Singleton(
        HealthStateMonitor,
        telemetry_repository=telemetry_repository,
        status_change_repository=status_change_repository,
        thresholds=providers.Factory(
            HealthThresholds,
            offline_after=providers.Factory(
                timedelta, minutes=config.monitor.offline_after_minutes
            ),
            warning_temperature=config.monitor.warning_temperature,
        ),
    )

    health_monitor_runner = providers.Singleton(
        HealthMonitorRunner,
        monitor=health_state_monitor,
        interval_seconds=config.monitor.interval_seconds,
    )

    # Application (use cases)
    process_device_alert_use_case = providers.Factory(
        ProcessDeviceAlertUseCase,
        directory=device_directory,
        decision_engine=decision_engine,
        dispatcher=command_dispatcher,
    )

    process_critical_alert_use_case = providers.Factory(
        ProcessCriticalAlertUseCase,
        directory=device_directory,
        decision_engine=decision_engine,
        dispatcher=command_dispatcher,
    )

    process_line_alert_use_case = providers.Factory(
        ProcessLineAlertUseCase,
        directory=device_directory,
        decision_engine=decision_engine,
        dispatcher=command_dispatcher,
    )

    execute_queued_command_use_case = providers.Factory(
        ExecuteQueuedCommandUseCase,
        dispatcher=command_dispatcher,
    )

    queue_device_command_use_case = providers.Factory(
        QueueDeviceCommandUseCase,
        dispatcher=command_dispatcher,
    )

    update_device_twin_use_case = providers.Factory(
        UpdateDeviceTwinUseCase,
        registry_gateway=registry_gateway,
    )

    get_device_metadata_use_case = providers.Factory(
        GetDeviceMetadataUseCase,
        directory=device_directory,
    )

    get_line_members_use_case = providers.Factory(
        GetLineMembersUseCase,
        directory=device_directory,
    )

    invalidate_directory_use_case = providers.Factory(
        InvalidateDirectoryUseCase,
        directory=device_directory,
    )

    optimize_production_line_use_case = providers.Factory(
        OptimizeProductionLineUseCase,
        decision_engine=decision_engine,
    )

    analyze_plant_optimization_use_case = providers.Factory(
        AnalyzePlantOptimizationUseCase,
        decision_engine=decision_engine,
    )

    get_health_status_use_case = providers.Factory(
        GetHealthStatusUseCase,
        health_check_service=health_check_service,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Lifecycle of the external resources held by the container.

    Used by the FastAPI lifespan and by the health monitor process.
    """
    container = get_container()
    mongo_database = container.mongo_database()

    try:
        logger.info("container.mongo.ensure_indexes")
        await mongo_database.create_indexes()
        logger.info("container.resources.initialized")
        yield container
    finally:
        logger.info("container.mongo.close")
        mongo_database.close()
        logger.info("container.resources.shutdown")
