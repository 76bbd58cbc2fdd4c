from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pytest

from iiot_coordinator.application.use_cases.command_dispatcher import (
    CommandDispatcher,
)
from iiot_coordinator.application.use_cases.device_directory import DeviceDirectory
from iiot_coordinator.domain.entities.commands import Command, LineCoordinationAction
from iiot_coordinator.domain.entities.device import (
    ConnectionState,
    DeviceTwin,
    DirectMethodResponse,
)
from iiot_coordinator.domain.entities.errors import (
    DeviceNotFoundError,
    DeviceRegistryError,
)
from iiot_coordinator.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iiot_coordinator.domain.services.decision_engine import DecisionEngine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


FIXED_NOW = datetime(2025, 10, 4, 12, 0, tzinfo=timezone.utc)


class FakeCollection:
    def __init__(self) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.last_pipeline: List[Dict[str, Any]] | None = None
        self.aggregate_result: List[Dict[str, Any]] = []
        self.dropped_indexes: List[str] = []
        self.created_indexes: List[tuple[Any, ...]] = []
        self.acknowledge_inserts = True

    def aggregate(self, pipeline: List[Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
        self.last_pipeline = pipeline
        return iter(self.aggregate_result)

    def insert_one(self, document: Dict[str, Any]) -> Any:
        if self.acknowledge_inserts:
            self.documents.append(document)
        return SimpleNamespace(acknowledged=self.acknowledge_inserts)

    def drop_index(self, index_name: str) -> None:
        self.dropped_indexes.append(index_name)

    def create_index(self, keys: Any, name: str | None = None, **kwargs: Any) -> Any:
        self.created_indexes.append((keys, name, kwargs))
        return name or keys


class FakeMongoDatabase:
    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}
        self.fail_inserts: Optional[Exception] = None

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    async def aggregate(
        self, collection_name: str, pipeline: Sequence[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        return list(self.get_collection(collection_name).aggregate(list(pipeline)))

    async def insert_one(self, collection_name: str, document: Dict[str, Any]) -> Any:
        if self.fail_inserts:
            raise self.fail_inserts
        self.get_collection(collection_name).insert_one(document)
        return document

    async def create_indexes(self) -> None:  # pragma: no cover - stub for tests
        pass

    def close(self) -> None:
        pass


class StubRegistryGateway(IDeviceRegistryGateway):
    """In-memory registry recording every call made by the code under test."""

    def __init__(self, twins: Iterable[DeviceTwin] = ()) -> None:
        self.twins: Dict[str, DeviceTwin] = {twin.device_id: twin for twin in twins}
        self.method_status: Dict[str, int] = {}
        self.fail_get_twin: Optional[DeviceRegistryError] = None
        self.fail_list: Optional[DeviceRegistryError] = None
        self.fail_invoke: Optional[DeviceRegistryError] = None
        self.get_twin_calls: List[str] = []
        self.list_calls = 0
        self.invocations: List[Dict[str, Any]] = []
        self.desired_updates: List[tuple[str, str, Any]] = []

    async def get_twin(self, device_id: str) -> DeviceTwin:
        self.get_twin_calls.append(device_id)
        if self.fail_get_twin:
            raise self.fail_get_twin
        twin = self.twins.get(device_id)
        if twin is None:
            raise DeviceNotFoundError(device_id)
        return twin

    async def list_twins(self) -> List[DeviceTwin]:
        self.list_calls += 1
        if self.fail_list:
            raise self.fail_list
        return list(self.twins.values())

    async def invoke_method(
        self,
        device_id: str,
        method_name: str,
        payload: Optional[Dict[str, Any]] = None,
        *,
        timeout_seconds: float,
    ) -> DirectMethodResponse:
        self.invocations.append(
            {
                "device_id": device_id,
                "method_name": method_name,
                "payload": payload or {},
                "timeout_seconds": timeout_seconds,
            }
        )
        if self.fail_invoke:
            raise self.fail_invoke
        return DirectMethodResponse(status=self.method_status.get(device_id, 200))

    async def update_desired_property(
        self, device_id: str, property_name: str, value: Any
    ) -> None:
        if device_id not in self.twins:
            raise DeviceNotFoundError(device_id)
        self.desired_updates.append((device_id, property_name, value))


class RecordingCommandChannel:
    def __init__(self) -> None:
        self.commands: List[Command] = []
        self.line_actions: List[LineCoordinationAction] = []

    async def publish_commands(self, commands: Sequence[Command]) -> int:
        self.commands.extend(commands)
        return len(commands)

    async def publish_line_action(self, action: LineCoordinationAction) -> None:
        self.line_actions.append(action)


class ManualClock:
    """Monotonic clock advanced explicitly by the test."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta.total_seconds()


def make_twin(
    device_id: str,
    line_id: Optional[str] = None,
    connected: bool = True,
    **reported: Any,
) -> DeviceTwin:
    if line_id is not None:
        reported.setdefault("lineId", line_id)
    return DeviceTwin(
        device_id=device_id,
        connection_state=(
            ConnectionState.CONNECTED if connected else ConnectionState.DISCONNECTED
        ),
        reported=reported,
    )


def _plant_twins() -> List[DeviceTwin]:
    return [
        make_twin(
            "Press1", "Line1", deviceType="Press", lineName="Primary Assembly Line"
        ),
        make_twin("Conveyor1", "Line1"),
        make_twin("QualityStation1", "Line1"),
        make_twin("Compressor1", "Line1"),
        make_twin("Press2", "Line2"),
    ]


@pytest.fixture()
def fake_mongo_database() -> FakeMongoDatabase:
    return FakeMongoDatabase()


@pytest.fixture()
def registry() -> StubRegistryGateway:
    return StubRegistryGateway(_plant_twins())


@pytest.fixture()
def channel() -> RecordingCommandChannel:
    return RecordingCommandChannel()


@pytest.fixture()
def dispatcher(
    registry: StubRegistryGateway, channel: RecordingCommandChannel
) -> CommandDispatcher:
    return CommandDispatcher(
        registry_gateway=registry,
        command_channel=channel,
        clock=lambda: FIXED_NOW + timedelta(milliseconds=250),
    )


@pytest.fixture()
def directory(registry: StubRegistryGateway) -> DeviceDirectory:
    return DeviceDirectory(registry_gateway=registry)


@pytest.fixture()
def decision_engine() -> DecisionEngine:
    return DecisionEngine()


@pytest.fixture()
def dummy_now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def twin_factory():
    return make_twin
