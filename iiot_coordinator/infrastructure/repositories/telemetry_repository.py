"""
Infrastructure Repository - Telemetry MongoDB Implementation

Reads the windowed rollups written by the stream analytics jobs. Only
documents whose ``DocumentType`` starts with ``telemetry-`` are considered.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from iiot_coordinator.domain.entities.device_health import TelemetrySnapshot
from iiot_coordinator.domain.repositories.status_change_repository import (
    ITelemetryRepository,
)
from iiot_coordinator.infrastructure.database.mongo_database import (
    TELEMETRY_COLLECTION,
    MongoDatabase,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

TELEMETRY_FILTER = {"DocumentType": {"$regex": "^telemetry-"}}


class TelemetryRepository(ITelemetryRepository):
    """MongoDB implementation of the telemetry read model."""

    def __init__(self, database: MongoDatabase):
        self.database = database
        self.collection_name = TELEMETRY_COLLECTION

    async def get_latest_snapshots(self) -> List[TelemetrySnapshot]:
        pipeline = [
            {"$match": TELEMETRY_FILTER},
            {"$sort": {"WindowEnd": DESCENDING}},
            {"$group": {"_id": "$DeviceId", "latest": {"$first": "$$ROOT"}}},
            {"$replaceRoot": {"newRoot": "$latest"}},
            {"$sort": {"DeviceId": 1}},
        ]
        documents = await self.database.aggregate(self.collection_name, pipeline)
        snapshots = []
        for document in documents:
            snapshot = self._from_document(document)
            if snapshot is None:
                logger.warning(
                    "telemetry.document_skipped",
                    device_id=document.get("DeviceId"),
                    window_end=document.get("WindowEnd"),
                )
                continue
            snapshots.append(snapshot)
        return snapshots

    @staticmethod
    def _from_document(document: Dict[str, Any]) -> Optional[TelemetrySnapshot]:
        device_id = document.get("DeviceId")
        window_end = _parse_window_end(document.get("WindowEnd"))
        if not device_id or window_end is None:
            return None
        return TelemetrySnapshot(
            device_id=device_id,
            window_end=window_end,
            line_id=document.get("LineId"),
            device_type=document.get("DeviceType"),
            avg_temperature=float(document.get("AvgTemperature") or 0.0),
            avg_production_rate=float(document.get("AvgProductionRate") or 0.0),
            availability_percentage=float(
                document.get("AvailabilityPercentage") or 0.0
            ),
            current_error_code=int(document.get("CurrentErrorCode") or 0),
        )


def _parse_window_end(value: Any) -> Optional[datetime]:
    """Window ends arrive either as BSON dates or as ISO-8601 strings."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
