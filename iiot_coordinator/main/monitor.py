"""
Health Monitor Entry Point - Main Layer

Runs the health-state monitor loop in its own process:
``python -m iiot_coordinator.main.monitor``.
"""

import asyncio
import signal

from iiot_coordinator.main.config import get_settings
from iiot_coordinator.main.container import app_lifespan, init_container
from iiot_coordinator.shared import (
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

logger = get_logger(__name__)


async def run_monitor() -> None:
    settings = get_settings()
    init_container(settings)

    async with app_lifespan() as container:
        runner = container.health_monitor_runner()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, runner.stop)
        await runner.run()


def main():
    configure_logging()
    update_logging_from_settings(get_settings())
    logger.info("Starting health monitor")
    asyncio.run(run_monitor())


if __name__ == "__main__":
    main()
