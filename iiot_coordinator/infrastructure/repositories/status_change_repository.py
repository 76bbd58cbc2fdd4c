"""
Infrastructure Repository - Status Change MongoDB Implementation

Status changes are stored as PascalCase documents tagged with
``DocumentType = "status-change"``; expiry relies on the TTL index created
by ``MongoDatabase.create_indexes``.
"""

from typing import Any, Dict

from pymongo.errors import PyMongoError

from iiot_coordinator.domain.entities.device_health import StatusChangeRecord
from iiot_coordinator.domain.repositories.status_change_repository import (
    IStatusChangeRepository,
)
from iiot_coordinator.infrastructure.database.mongo_database import (
    STATUS_CHANGES_COLLECTION,
    MongoDatabase,
)
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)


class StatusChangeRepository(IStatusChangeRepository):
    """MongoDB implementation of the status change repository."""

    def __init__(self, database: MongoDatabase):
        self.database = database
        self.collection_name = STATUS_CHANGES_COLLECTION

    async def save(self, record: StatusChangeRecord) -> StatusChangeRecord:
        try:
            await self.database.insert_one(
                self.collection_name, self._to_document(record)
            )
        except PyMongoError as e:
            logger.error(
                "status_changes.save_failed",
                device_id=record.device_id,
                error=str(e),
            )
            raise
        logger.debug(
            "status_changes.saved",
            device_id=record.device_id,
            new_status=record.new_status.value,
        )
        return record

    @staticmethod
    def _to_document(record: StatusChangeRecord) -> Dict[str, Any]:
        return {
            "id": record.id,
            "DocumentType": record.document_type,
            "DeviceId": record.device_id,
            "LineId": record.line_id,
            "DeviceType": record.device_type,
            "Timestamp": record.timestamp,
            "OldStatus": record.old_status.value if record.old_status else None,
            "NewStatus": record.new_status.value,
            "Reason": record.reason,
            "Temperature": record.temperature,
            "ErrorCode": record.error_code,
            "AvailabilityPercentage": record.availability_percentage,
            "ttl": record.ttl,
        }
