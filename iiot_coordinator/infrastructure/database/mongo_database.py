"""
MongoDB Database - Infrastructure Layer

Thin wrapper around the pymongo client holding the ``status_changes`` and
``telemetry`` collections used by the health-state monitor.
"""

from typing import Any, Dict, List, Sequence

import pymongo.errors
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from iiot_coordinator.domain.entities.device_health import STATUS_CHANGE_TTL_SECONDS
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)

STATUS_CHANGES_COLLECTION = "status_changes"
TELEMETRY_COLLECTION = "telemetry"


class MongoDatabase:
    """MongoDB database client."""

    def __init__(self, mongo_uri: str, db_name: str):
        self.client: MongoClient = MongoClient(mongo_uri)
        self.db: Database = self.client[db_name]

    async def aggregate(
        self, collection_name: str, pipeline: Sequence[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        return list(self.db[collection_name].aggregate(list(pipeline)))

    async def insert_one(
        self, collection_name: str, document: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Insert a document into a collection.

        Raises:
            OperationFailure: If the insert is not acknowledged
        """
        result = self.db[collection_name].insert_one(document)
        if not result.acknowledged:
            raise pymongo.errors.OperationFailure(
                f"Failed to insert document in {collection_name}"
            )
        return document

    def close(self) -> None:
        self.client.close()

    async def create_indexes(self) -> None:
        """Create the status-change TTL index and the telemetry window index."""
        status_changes = self.db[STATUS_CHANGES_COLLECTION]
        try:
            # Recreated so a changed retention period takes effect.
            status_changes.drop_index("timestamp_ttl_idx")
        except pymongo.errors.OperationFailure:
            # Absent on first start
            pass
        try:
            status_changes.create_index(
                "Timestamp",
                name="timestamp_ttl_idx",
                expireAfterSeconds=STATUS_CHANGE_TTL_SECONDS,
            )
        except pymongo.errors.OperationFailure as e:
            logger.warning(
                "mongo.indexes_failed",
                collection=STATUS_CHANGES_COLLECTION,
                error=str(e),
            )

        try:
            self.db[TELEMETRY_COLLECTION].create_index(
                [("DeviceId", ASCENDING), ("WindowEnd", DESCENDING)],
                name="device_window_idx",
                background=True,
            )
        except pymongo.errors.OperationFailure as e:
            logger.warning(
                "mongo.indexes_failed",
                collection=TELEMETRY_COLLECTION,
                error=str(e),
            )
