"""Infrastructure implementation of the dependency health checks."""

from __future__ import annotations

import asyncio
from time import perf_counter
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import httpx
import pika
import redis.asyncio as aioredis

from iiot_coordinator.domain.entities.system_health import (
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)
from iiot_coordinator.domain.ports.health_check import IHealthCheckService
from iiot_coordinator.infrastructure.database.mongo_database import MongoDatabase
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

REGISTRY_HEALTH_PATHS = ("/health", "/")


class HealthCheckService(IHealthCheckService):
    """Check MongoDB, RabbitMQ, Redis and the device registry."""

    def __init__(
        self,
        mongo_database: Optional[MongoDatabase],
        broker_url: str,
        redis_url: str,
        registry_url: str,
        *,
        http_timeout: float = 5.0,
        socket_timeout: float = 5.0,
    ) -> None:
        self._mongo_database = mongo_database
        self._broker_url = broker_url
        self._redis_url = redis_url
        self._registry_url = registry_url.rstrip("/") if registry_url else ""
        self._http_timeout = http_timeout
        self._socket_timeout = socket_timeout

    async def evaluate(self) -> SystemHealth:
        """Run every dependency check concurrently and aggregate the result."""
        checks: Dict[str, Callable[[], Awaitable[DependencyStatus]]] = {
            "mongo": self._check_mongo,
            "rabbitmq": self._check_rabbitmq,
            "redis": self._check_redis,
            "device_registry": self._check_registry,
        }
        results = await asyncio.gather(
            *(check() for check in checks.values()), return_exceptions=True
        )

        statuses: List[DependencyStatus] = []
        for name, result in zip(checks, results):
            if isinstance(result, BaseException):
                logger.error("health.check_crashed", dependency=name, error=str(result))
                statuses.append(
                    DependencyStatus(
                        name=name, status=ServiceStatus.DOWN, message=str(result)
                    )
                )
            else:
                statuses.append(result)

        return SystemHealth(status=self._aggregate_status(statuses), dependencies=statuses)

    @staticmethod
    def _aggregate_status(statuses: Iterable[DependencyStatus]) -> ServiceStatus:
        seen = {status.status for status in statuses}
        for candidate in (ServiceStatus.DOWN, ServiceStatus.DEGRADED, ServiceStatus.UNKNOWN):
            if candidate in seen:
                return candidate
        return ServiceStatus.UP

    async def _timed(
        self,
        name: str,
        check: Callable[[], Awaitable[None]],
        ok_message: str,
        fail_message: str,
    ) -> DependencyStatus:
        start = perf_counter()
        try:
            await check()
        except Exception as exc:
            return DependencyStatus(
                name=name,
                status=ServiceStatus.DOWN,
                message=f"{fail_message}: {exc}",
                latency_ms=(perf_counter() - start) * 1000,
            )
        return DependencyStatus(
            name=name,
            status=ServiceStatus.UP,
            message=ok_message,
            latency_ms=(perf_counter() - start) * 1000,
        )

    async def _check_mongo(self) -> DependencyStatus:
        if not self._mongo_database:
            return DependencyStatus(
                name="mongo",
                status=ServiceStatus.UNKNOWN,
                message="Mongo database client not configured.",
            )

        async def _ping() -> None:
            await asyncio.to_thread(self._mongo_database.client.admin.command, "ping")

        status = await self._timed(
            "mongo", _ping, "MongoDB ping successful", "MongoDB ping failed"
        )
        status.details["database"] = self._mongo_database.db.name
        return status

    async def _check_rabbitmq(self) -> DependencyStatus:
        if not self._broker_url:
            return DependencyStatus(
                name="rabbitmq",
                status=ServiceStatus.UNKNOWN,
                message="RabbitMQ broker URL not configured.",
            )

        def _connect() -> None:
            connection = pika.BlockingConnection(pika.URLParameters(self._broker_url))
            connection.close()

        async def _ping() -> None:
            await asyncio.to_thread(_connect)

        return await self._timed(
            "rabbitmq",
            _ping,
            "RabbitMQ connection successful",
            "RabbitMQ connection failed",
        )

    async def _check_redis(self) -> DependencyStatus:
        if not self._redis_url:
            return DependencyStatus(
                name="redis",
                status=ServiceStatus.UNKNOWN,
                message="Redis URL not configured.",
            )

        async def _ping() -> None:
            client = aioredis.from_url(
                self._redis_url,
                socket_connect_timeout=self._socket_timeout,
                socket_timeout=self._socket_timeout,
            )
            try:
                await client.ping()
            finally:
                await client.aclose()

        return await self._timed("redis", _ping, "Redis ping successful", "Redis ping failed")

    async def _check_registry(self) -> DependencyStatus:
        if not self._registry_url:
            return DependencyStatus(
                name="device_registry",
                status=ServiceStatus.UNKNOWN,
                message="Device registry URL not configured.",
            )

        last: Optional[DependencyStatus] = None
        for path in REGISTRY_HEALTH_PATHS:
            last = await self._hit_registry(f"{self._registry_url}{path}")
            if last.status != ServiceStatus.DOWN:
                return last
        return last

    async def _hit_registry(self, url: str) -> DependencyStatus:
        start = perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                response = await client.get(url)
        except httpx.RequestError as exc:
            return DependencyStatus(
                name="device_registry",
                status=ServiceStatus.DOWN,
                message=f"HTTP request failed: {exc}",
                latency_ms=(perf_counter() - start) * 1000,
                details={"url": url},
            )

        status_code = response.status_code
        if status_code >= 500:
            status = ServiceStatus.DOWN
        elif status_code >= 400:
            status = ServiceStatus.DEGRADED
        else:
            status = ServiceStatus.UP
        return DependencyStatus(
            name="device_registry",
            status=status,
            message=f"HTTP {status_code}",
            latency_ms=(perf_counter() - start) * 1000,
            details={"url": url, "status_code": status_code},
        )
