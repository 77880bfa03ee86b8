"""
Schema Version Tracker

Reads and writes the single record holding the database schema version.
"""

import logging

from ..config import DEFAULT_SCHEMA_VERSION_COLLECTION, SCHEMA_VERSION_ID
from ..storage import DocumentStore
from .base import SchemaVersion

logger = logging.getLogger(__name__)


class VersionTracker:
    """Tracks the database schema version in a well-known collection."""

    def __init__(
        self,
        store: DocumentStore,
        collection_name: str = DEFAULT_SCHEMA_VERSION_COLLECTION,
    ) -> None:
        """
        Initialize version tracker.

        Args:
            store: Document store holding the version record
            collection_name: Collection the version record lives in
        """
        self.store = store
        self.collection_name = collection_name

    def get_schema_version(self) -> SchemaVersion:
        """Get the stored schema version record; version 0 if none has been written."""
        collection = self.store.get_collection(self.collection_name)
        return SchemaVersion.from_document(collection.find_one({"_id": SCHEMA_VERSION_ID}))

    def get_current_version(self) -> int:
        version = self.get_schema_version().version
        logger.debug(f"Current schema version: {version}")
        return version

    def set_version(self, version: int) -> None:
        """Persist the database schema version, creating the record if needed."""
        record = SchemaVersion(version)
        collection = self.store.get_collection(self.collection_name)
        collection.replace_by_id(record.id, record.to_document(), upsert=True)
        logger.debug(f"Database schema version set to {version}")
