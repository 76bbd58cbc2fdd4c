"""Shared Celery infrastructure components."""

from typing import Any, Optional

from celery import Task

from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)


class CallbackTask(Task):
    """
    Base task class that centralizes logging and retry behaviour.

    Messages are acknowledged only after the handler returns and any raised
    exception triggers a bounded, backed-off redelivery. Handlers are
    idempotent, so a redelivered alert at worst repeats its commands.
    """

    abstract = True
    acks_late = True
    autoretry_for = (Exception,)
    max_retries = 5
    retry_backoff = True
    retry_backoff_max = 120
    retry_jitter = True

    _container: Optional[Any] = None

    @property
    def container(self) -> Any:
        """Dependency container, initialised on first use inside the worker."""
        if CallbackTask._container is None:
            from iiot_coordinator.main.config import get_settings
            from iiot_coordinator.main.container import get_container, init_container

            try:
                CallbackTask._container = get_container()
            except RuntimeError:
                CallbackTask._container = init_container(get_settings())
        return CallbackTask._container

    def on_success(self, retval, task_id, args, kwargs):
        logger.info("task.succeeded", task_id=task_id, task=self.name, result=retval)

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        logger.warning(
            "task.retrying",
            task_id=task_id,
            task=self.name,
            retries=self.request.retries,
            error=str(exc),
        )

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(
            "task.failed",
            task_id=task_id,
            task=self.name,
            error=str(exc),
            traceback=einfo.traceback,
            exc_info=exc,
        )
