from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace
from typing import cast
from unittest.mock import AsyncMock

import httpx
import pytest

from iiot_coordinator.domain.entities.system_health import (
    DependencyStatus,
    ServiceStatus,
)
from iiot_coordinator.infrastructure.database.mongo_database import MongoDatabase
from iiot_coordinator.infrastructure.services.health_check_service import (
    HealthCheckService,
)

MODULE = "iiot_coordinator.infrastructure.services.health_check_service"


@dataclass
class _StubMongoClient:
    class _Admin:
        @staticmethod
        def command(cmd: str) -> None:
            if cmd != "ping":
                raise ValueError("Unexpected command")

    @property
    def admin(self) -> "_StubMongoClient._Admin":
        return self._Admin()


@dataclass
class _StubMongoDatabase:
    name: str = "iiot"

    def __post_init__(self) -> None:
        self.client = _StubMongoClient()
        self.db = SimpleNamespace(name=self.name)

    def close(self) -> None:
        pass


def _make_service(**overrides) -> HealthCheckService:
    params = dict(
        mongo_database=cast(MongoDatabase, _StubMongoDatabase()),
        broker_url="amqp://guest@localhost/",
        redis_url="redis://localhost/0",
        registry_url="http://registry/",
    )
    params.update(overrides)
    return HealthCheckService(**params)


class _Response:
    def __init__(self, status_code: int):
        self.status_code = status_code


class _Client:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.urls: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def get(self, url):
        self.urls.append(url)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return _Response(outcome)


def test_aggregate_status_priority() -> None:
    statuses = [
        DependencyStatus(name="mongo", status=ServiceStatus.UP),
        DependencyStatus(name="redis", status=ServiceStatus.DEGRADED),
        DependencyStatus(name="rabbitmq", status=ServiceStatus.DOWN),
    ]
    assert HealthCheckService._aggregate_status(statuses) is ServiceStatus.DOWN
    assert (
        HealthCheckService._aggregate_status(
            [DependencyStatus(name="mongo", status=ServiceStatus.UP)]
        )
        is ServiceStatus.UP
    )


@pytest.mark.asyncio
async def test_evaluate_collects_dependency_statuses(monkeypatch) -> None:
    service = _make_service()

    monkeypatch.setattr(
        service,
        "_check_mongo",
        AsyncMock(return_value=DependencyStatus(name="mongo", status=ServiceStatus.UP)),
    )
    monkeypatch.setattr(
        service,
        "_check_rabbitmq",
        AsyncMock(
            return_value=DependencyStatus(name="rabbitmq", status=ServiceStatus.UP)
        ),
    )
    monkeypatch.setattr(
        service,
        "_check_redis",
        AsyncMock(
            return_value=DependencyStatus(name="redis", status=ServiceStatus.DEGRADED)
        ),
    )
    monkeypatch.setattr(
        service, "_check_registry", AsyncMock(side_effect=RuntimeError("boom"))
    )

    health = await service.evaluate()

    assert [d.name for d in health.dependencies] == [
        "mongo",
        "rabbitmq",
        "redis",
        "device_registry",
    ]
    assert health.dependencies[-1].status is ServiceStatus.DOWN
    assert health.dependencies[-1].message == "boom"
    assert health.status is ServiceStatus.DOWN


@pytest.mark.asyncio
async def test_check_mongo_success_reports_database() -> None:
    status = await _make_service()._check_mongo()

    assert status.status is ServiceStatus.UP
    assert status.details["database"] == "iiot"
    assert status.latency_ms is not None


@pytest.mark.asyncio
async def test_check_mongo_handles_failure() -> None:
    class _FailingMongo:
        def __init__(self) -> None:
            self.client = SimpleNamespace(
                admin=SimpleNamespace(
                    command=lambda cmd: (_ for _ in ()).throw(
                        RuntimeError("mongo error")
                    )
                )
            )
            self.db = SimpleNamespace(name="iiot")

    service = _make_service(mongo_database=cast(MongoDatabase, _FailingMongo()))

    status = await service._check_mongo()
    assert status.status is ServiceStatus.DOWN
    assert "mongo error" in status.message


@pytest.mark.asyncio
async def test_unconfigured_dependencies_are_unknown() -> None:
    service = HealthCheckService(
        mongo_database=None, broker_url="", redis_url="", registry_url=""
    )

    health = await service.evaluate()

    assert {d.status for d in health.dependencies} == {ServiceStatus.UNKNOWN}
    assert health.status is ServiceStatus.UNKNOWN


@pytest.mark.asyncio
async def test_check_rabbitmq_success(monkeypatch) -> None:
    class _Connection:
        def close(self) -> None:
            return None

    monkeypatch.setattr(
        f"{MODULE}.pika.BlockingConnection", lambda *args, **kwargs: _Connection()
    )
    monkeypatch.setattr(f"{MODULE}.pika.URLParameters", lambda url: url)

    status = await _make_service()._check_rabbitmq()
    assert status.status is ServiceStatus.UP


@pytest.mark.asyncio
async def test_check_rabbitmq_failure(monkeypatch) -> None:
    def _raise(*args, **kwargs):
        raise RuntimeError("fail")

    monkeypatch.setattr(f"{MODULE}.pika.BlockingConnection", _raise)

    status = await _make_service()._check_rabbitmq()
    assert status.status is ServiceStatus.DOWN


@pytest.mark.asyncio
async def test_check_redis_success_closes_client(monkeypatch) -> None:
    class _RedisClient:
        closed = False

        async def ping(self):
            return True

        async def aclose(self):
            self.closed = True

    client = _RedisClient()
    monkeypatch.setattr(f"{MODULE}.aioredis.from_url", lambda *args, **kwargs: client)

    status = await _make_service()._check_redis()
    assert status.status is ServiceStatus.UP
    assert client.closed is True


@pytest.mark.asyncio
async def test_check_registry_falls_back_to_root(monkeypatch) -> None:
    client = _Client([503, 200])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    status = await _make_service()._check_registry()

    assert status.status is ServiceStatus.UP
    assert client.urls == ["http://registry/health", "http://registry/"]


@pytest.mark.asyncio
async def test_check_registry_client_error_is_degraded(monkeypatch) -> None:
    client = _Client([404])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    status = await _make_service()._check_registry()

    assert status.status is ServiceStatus.DEGRADED
    assert status.details["status_code"] == 404
    assert client.urls == ["http://registry/health"]


@pytest.mark.asyncio
async def test_check_registry_unreachable(monkeypatch) -> None:
    error = httpx.ConnectError("refused")
    client = _Client([error, error])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    status = await _make_service()._check_registry()

    assert status.status is ServiceStatus.DOWN
    assert "refused" in status.message
