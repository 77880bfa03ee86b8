"""
Document Store Interfaces
Defines the abstract document I/O surface the migration engine consumes.
Any driver can be plugged in by implementing these two classes.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

Document = dict[str, Any]
Filter = dict[str, Any]


class DocumentCollection(ABC):
    """
    A named collection of stored documents.

    Documents are ordered field/value mappings identified by their "_id"
    field. Filters support equality ({"field": value}) and inequality
    ({"field": {"$ne": value}}); dotted paths address nested fields.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Collection name."""
        pass

    @abstractmethod
    def find(self, filter: Filter | None = None) -> Iterator[Document]:
        """Stream matching documents in their generic structured form."""
        pass

    @abstractmethod
    def find_raw(self, filter: Filter | None = None) -> Iterator[bytes]:
        """Stream matching documents in their raw stored encoding."""
        pass

    @abstractmethod
    def insert_one(self, document: Document | bytes) -> Any:
        """Insert a document and return its id."""
        pass

    @abstractmethod
    def replace_by_id(self, document_id: Any, document: Document | bytes, upsert: bool = False) -> bool:
        """Replace the document with the given id. Returns whether a document was written."""
        pass

    @abstractmethod
    def delete_by_id(self, document_id: Any) -> bool:
        """Delete the document with the given id. Returns whether it existed."""
        pass

    @abstractmethod
    def create_index(self, keys: list[str], name: str | None = None, unique: bool = False) -> str:
        """Create an index and return its name."""
        pass

    @abstractmethod
    def drop_index(self, name: str) -> None:
        """Drop an index by name."""
        pass

    @abstractmethod
    def index_names(self) -> list[str]:
        """Names of all indexes on the collection."""
        pass

    def find_one(self, filter: Filter | None = None) -> Document | None:
        """Return the first matching document, or None."""
        return next(iter(self.find(filter)), None)

    def count(self, filter: Filter | None = None) -> int:
        return sum(1 for _ in self.find(filter))


class DocumentStore(ABC):
    """A database holding named document collections."""

    @abstractmethod
    def get_collection(self, name: str) -> DocumentCollection:
        """Get (creating on first use) a collection by name."""
        pass

    @abstractmethod
    def drop_collection(self, name: str) -> None:
        pass

    @abstractmethod
    def list_collection_names(self) -> list[str]:
        pass
