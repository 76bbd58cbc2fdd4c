"""
Worker Entry Point - Main Layer

Starts the Celery worker consuming the alert, coordination and command
queues. The dependency container is created lazily by the task base class.
"""

import os

from iiot_coordinator.main.config import get_settings
from iiot_coordinator.shared import (
    EnumChannel,
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

configure_logging()

settings = get_settings()
update_logging_from_settings(settings)

logger = get_logger(__name__)


def create_worker():
    """Configure and return the Celery application used by the worker."""
    settings = get_settings()

    os.environ.setdefault("CELERY_BROKER_URL", settings.celery.broker_url)
    os.environ.setdefault("CELERY_RESULT_BACKEND", settings.celery.result_backend_url)

    from iiot_coordinator.infrastructure.services.celery_config import (
        create_celery_app,
    )

    worker_app = create_celery_app(
        broker_url=settings.celery.broker_url,
        backend_url=settings.celery.result_backend_url,
    )

    logger.info(
        "Configuring Celery worker",
        broker_url=settings.celery.broker_url,
        app_name=worker_app.main,
    )
    return worker_app


def main():
    """Main entry point for Celery worker."""

    logger.info("Starting Celery worker")
    worker_app = create_worker()
    worker_app.worker_main(
        [
            "worker",
            f"--loglevel={settings.logging.level.value.lower()}",
            "--queues=" + ",".join(channel.value for channel in EnumChannel),
            f"--concurrency={settings.celery.concurrency}",
        ]
    )


if __name__ == "__main__":
    main()
