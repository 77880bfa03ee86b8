"""
Collection Name Resolver

Maps application document types to the names of the storage collections
that hold them. Mappings are registered once by the host before startup.
"""

import logging
from collections.abc import Iterator

from ..exceptions import DuplicateMappingError, InvalidArgumentError, MissingMappingError

logger = logging.getLogger(__name__)


class CollectionNameResolver:
    """Lookup a document type and get the storage collection name for it."""

    def __init__(self) -> None:
        self._collection_names: dict[type, str] = {}

    def get_collection_name(self, document_type: type) -> str:
        """
        Get the collection name for a type.

        Raises:
            MissingMappingError: If the type is not mapped to a collection
        """
        try:
            return self._collection_names[document_type]
        except KeyError:
            raise MissingMappingError(document_type) from None

    def add_type(self, document_type: type, collection_name: str) -> "CollectionNameResolver":
        """
        Add a mapping between a type and a storage collection.

        Returns:
            Self for method chaining

        Raises:
            InvalidArgumentError: If the collection name is empty
            DuplicateMappingError: If the type is already mapped
        """
        if not collection_name or not collection_name.strip():
            raise InvalidArgumentError(
                f"Collection name for {document_type.__qualname__} cannot be empty",
                field="collection_name",
            )

        existing = self._collection_names.get(document_type)
        if existing is not None:
            raise DuplicateMappingError(document_type, existing)

        self._collection_names[document_type] = collection_name
        logger.debug(f"Mapped {document_type.__qualname__} to collection '{collection_name}'")
        return self

    def mapped_types(self) -> list[type]:
        return list(self._collection_names)

    def __contains__(self, document_type: object) -> bool:
        return document_type in self._collection_names

    def __iter__(self) -> Iterator[tuple[type, str]]:
        return iter(self._collection_names.items())

    def __len__(self) -> int:
        return len(self._collection_names)
