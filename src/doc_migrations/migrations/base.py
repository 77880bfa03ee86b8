"""
Base Migration Classes

Defines the two kinds of migration the engine understands:
- DatabaseMigration: side effects against the whole store (indexes,
  cross-collection changes), tracked by the database schema version record
- DocumentMigration: a transform of a single stored document of one type,
  tracked by the version field inside each document
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import SCHEMA_VERSION_ID

logger = logging.getLogger(__name__)


class MigrationTiming(str, Enum):
    """When a document migration is eligible to run."""

    AT_START = "at_start"
    ON_ACCESS = "on_access"


@dataclass
class SchemaVersion:
    """Represents the current version of the database schema."""

    version: int = 0
    id: str = field(default=SCHEMA_VERSION_ID)

    def to_document(self) -> dict[str, Any]:
        return {"_id": self.id, "version": self.version}

    @classmethod
    def from_document(cls, document: dict[str, Any] | None) -> "SchemaVersion":
        if not document:
            return cls(0)
        return cls(version=int(document.get("version", 0)), id=document.get("_id", SCHEMA_VERSION_ID))


class DatabaseMigration(ABC):
    """
    Base class for database level migrations.

    Database migrations run once, in version order, at application startup,
    before any document migration. Subclasses implement up() and down()
    against the store passed at construction.
    """

    def __init__(self, store: Any) -> None:
        """
        Initialize migration with the document store.

        Args:
            store: DocumentStore instance the migration operates on
        """
        self.store = store

    @property
    @abstractmethod
    def version(self) -> int:
        """Migration version number (must be unique across database migrations)."""
        pass

    @property
    def description(self) -> str:
        """Human-readable description of what this migration does."""
        return self.__class__.__name__

    @abstractmethod
    def up(self) -> None:
        """Migrate the database from the previous version to this version."""
        pass

    @abstractmethod
    def down(self) -> None:
        """Migrate the database from this version to the previous version."""
        pass

    def create_index_if_not_exists(
        self, collection_name: str, keys: list[str], name: str | None = None, unique: bool = False
    ) -> str:
        """
        Create an index unless one with the same name already exists.

        Returns:
            Name of the index
        """
        collection = self.store.get_collection(collection_name)
        index_name = name or "_".join(f"{key}_1" for key in keys)
        if index_name in collection.index_names():
            logger.debug(f"Index {index_name} already exists on {collection_name}")
            return index_name

        created = collection.create_index(keys, name=index_name, unique=unique)
        logger.info(f"Created index {created} on {collection_name}")
        return created

    def drop_index_if_exists(self, collection_name: str, name: str) -> bool:
        """Drop an index if present. Returns whether anything was dropped."""
        collection = self.store.get_collection(collection_name)
        if name not in collection.index_names():
            logger.debug(f"Index {name} not present on {collection_name}")
            return False

        collection.drop_index(name)
        logger.info(f"Dropped index {name} on {collection_name}")
        return True

    def get_migration_info(self) -> dict[str, Any]:
        return {"version": self.version, "description": self.description}


class DocumentMigration(ABC):
    """
    Base class for migrations of individual documents.

    up() and down() receive the stored document as a plain dict and mutate
    it in place. The engine maintains the version field; migrations must not
    touch it.
    """

    @property
    @abstractmethod
    def version(self) -> int:
        """Schema version this migration produces (unique per document type)."""
        pass

    @property
    @abstractmethod
    def document_type(self) -> type:
        """Application type whose documents this migration transforms."""
        pass

    @property
    def timing(self) -> MigrationTiming:
        """When to run the migration. Defaults to application start."""
        return MigrationTiming.AT_START

    @property
    def description(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def up(self, document: dict[str, Any]) -> None:
        """Migrate the document from the previous version to this version."""
        pass

    @abstractmethod
    def down(self, document: dict[str, Any]) -> None:
        """Migrate the document from this version to the previous version."""
        pass

    def get_migration_info(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "document_type": self.document_type.__qualname__,
            "timing": self.timing.value,
            "description": self.description,
        }
