"""
Typed Collection

Application-facing view of a collection that reads and writes pydantic
models through a SerializerRegistry. Versioned types therefore get their
version stamped on write and are migrated lazily on read.
"""

import logging
from collections.abc import Iterator
from typing import Any, Generic, TypeVar

from ..serialization import SerializerRegistry
from .interfaces import DocumentCollection, Filter
from .memory import ID_FIELD

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TypedCollection(Generic[T]):
    """Reads and writes objects of one application type."""

    def __init__(
        self,
        collection: DocumentCollection,
        document_type: type[T],
        serializers: SerializerRegistry,
    ) -> None:
        self.collection = collection
        self.document_type = document_type
        self.serializers = serializers

    def insert(self, value: T) -> Any:
        return self.collection.insert_one(self.serializers.encode(value))

    def replace(self, value: T, upsert: bool = True) -> bool:
        document = self.serializers.to_document(value)
        return self.collection.replace_by_id(document[ID_FIELD], document, upsert=upsert)

    def find(self, filter: Filter | None = None) -> Iterator[T]:
        for raw in self.collection.find_raw(filter):
            yield self.serializers.decode(self.document_type, raw)

    def find_one(self, filter: Filter | None = None) -> T | None:
        return next(iter(self.find(filter)), None)

    def get(self, document_id: Any) -> T | None:
        return self.find_one({ID_FIELD: document_id})

    def delete(self, document_id: Any) -> bool:
        return self.collection.delete_by_id(document_id)
