"""
In-Memory Document Store

Reference implementation of the DocumentStore interfaces. Each document is
kept in its raw encoded form, keyed by "_id", so reads always go through the
same decode path a real driver would use. Thread-safe; iteration works over a
snapshot of matching ids and reads each document lazily.
"""

import logging
import threading
import uuid
from collections.abc import Iterator, Mapping
from typing import Any

from ..exceptions import DuplicateKeyError, IndexNotFoundError, StorageError
from ..serialization import decode_document, encode_document
from .interfaces import Document, DocumentCollection, DocumentStore, Filter

logger = logging.getLogger(__name__)

ID_FIELD = "_id"
ID_INDEX_NAME = "_id_"

_MISSING = object()


def get_field(document: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted field path, returning a sentinel when absent."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def matches(document: Mapping[str, Any], filter: Filter | None) -> bool:
    """Evaluate the supported filter subset against a document."""
    if not filter:
        return True

    for path, condition in filter.items():
        value = get_field(document, path)
        if isinstance(condition, Mapping) and any(k.startswith("$") for k in condition):
            for operator, operand in condition.items():
                if operator == "$ne":
                    if value is not _MISSING and value == operand:
                        return False
                elif operator == "$eq":
                    if value is _MISSING or value != operand:
                        return False
                elif operator == "$exists":
                    if (value is not _MISSING) != bool(operand):
                        return False
                else:
                    raise StorageError(f"Unsupported filter operator: {operator}", operation="find")
        elif value is _MISSING or value != condition:
            return False

    return True


class MemoryCollection(DocumentCollection):
    """A collection held in process memory."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._documents: dict[Any, bytes] = {}
        self._indexes: dict[str, dict[str, Any]] = {ID_INDEX_NAME: {"keys": [ID_FIELD], "unique": True}}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    def find(self, filter: Filter | None = None) -> Iterator[Document]:
        for _, document in self._scan(filter):
            yield document

    def find_raw(self, filter: Filter | None = None) -> Iterator[bytes]:
        for raw, _ in self._scan(filter):
            yield raw

    def insert_one(self, document: Document | bytes) -> Any:
        parsed = decode_document(document)
        if ID_FIELD not in parsed:
            parsed = {ID_FIELD: uuid.uuid4().hex, **parsed}

        document_id = parsed[ID_FIELD]
        with self._lock:
            if document_id in self._documents:
                raise DuplicateKeyError(
                    f"Duplicate key {document_id!r} in {self._name}",
                    collection=self._name,
                    index=ID_INDEX_NAME,
                )
            self._check_unique(parsed, document_id)
            self._documents[document_id] = encode_document(parsed)

        return document_id

    def replace_by_id(self, document_id: Any, document: Document | bytes, upsert: bool = False) -> bool:
        parsed = decode_document(document)
        if parsed.get(ID_FIELD, document_id) != document_id:
            raise StorageError(
                f"Replacement document id does not match {document_id!r}",
                collection=self._name,
                operation="replace document",
            )
        parsed.setdefault(ID_FIELD, document_id)

        with self._lock:
            if document_id not in self._documents and not upsert:
                return False
            self._check_unique(parsed, document_id)
            self._documents[document_id] = encode_document(parsed)

        return True

    def delete_by_id(self, document_id: Any) -> bool:
        with self._lock:
            return self._documents.pop(document_id, None) is not None

    def create_index(self, keys: list[str], name: str | None = None, unique: bool = False) -> str:
        if not keys:
            raise StorageError("Index requires at least one key", collection=self._name, operation="create index")

        index_name = name or "_".join(f"{key}_1" for key in keys)
        with self._lock:
            existing = self._indexes.get(index_name)
            if existing is not None:
                if existing != {"keys": list(keys), "unique": unique}:
                    raise StorageError(
                        f"Index '{index_name}' already exists with different options",
                        collection=self._name,
                        operation="create index",
                    )
                return index_name

            spec = {"keys": list(keys), "unique": unique}
            if unique:
                self._check_existing_unique(index_name, spec)
            self._indexes[index_name] = spec

        return index_name

    def drop_index(self, name: str) -> None:
        if name == ID_INDEX_NAME:
            raise StorageError("Cannot drop the _id index", collection=self._name, operation="drop index")
        with self._lock:
            if self._indexes.pop(name, None) is None:
                raise IndexNotFoundError(name, collection=self._name)

    def index_names(self) -> list[str]:
        with self._lock:
            return list(self._indexes)

    def index_information(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {name: dict(spec) for name, spec in self._indexes.items()}

    def __len__(self) -> int:
        return len(self._documents)

    def _scan(self, filter: Filter | None) -> Iterator[tuple[bytes, Document]]:
        with self._lock:
            ids = list(self._documents)

        for document_id in ids:
            with self._lock:
                raw = self._documents.get(document_id)
            if raw is None:
                continue
            document = decode_document(raw)
            if matches(document, filter):
                yield raw, document

    def _index_key(self, spec: dict[str, Any], document: Mapping[str, Any]) -> tuple:
        key = []
        for path in spec["keys"]:
            value = get_field(document, path)
            key.append(None if value is _MISSING else repr(value))
        return tuple(key)

    def _check_unique(self, document: Mapping[str, Any], document_id: Any) -> None:
        for index_name, spec in self._indexes.items():
            if not spec["unique"] or index_name == ID_INDEX_NAME:
                continue
            key = self._index_key(spec, document)
            for other_id, raw in self._documents.items():
                if other_id == document_id:
                    continue
                if self._index_key(spec, decode_document(raw)) == key:
                    raise DuplicateKeyError(
                        f"Duplicate key {key!r} for index '{index_name}' in {self._name}",
                        collection=self._name,
                        index=index_name,
                    )

    def _check_existing_unique(self, index_name: str, spec: dict[str, Any]) -> None:
        seen: set[tuple] = set()
        for raw in self._documents.values():
            key = self._index_key(spec, decode_document(raw))
            if key in seen:
                raise DuplicateKeyError(
                    f"Cannot build unique index '{index_name}': duplicate key {key!r}",
                    collection=self._name,
                    index=index_name,
                )
            seen.add(key)


class MemoryDocumentStore(DocumentStore):
    """A document store held in process memory."""

    def __init__(self) -> None:
        self._collections: dict[str, MemoryCollection] = {}
        self._lock = threading.Lock()

    def get_collection(self, name: str) -> MemoryCollection:
        if not name:
            raise StorageError("Collection name cannot be empty", operation="get collection")
        with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                collection = MemoryCollection(name)
                self._collections[name] = collection
                logger.debug(f"Created collection {name}")
            return collection

    def drop_collection(self, name: str) -> None:
        with self._lock:
            self._collections.pop(name, None)

    def list_collection_names(self) -> list[str]:
        with self._lock:
            return list(self._collections)
