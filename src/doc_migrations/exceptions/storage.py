"""
Storage Exception Classes
Handles errors raised by document store implementations.
"""

from typing import Any

from .base import MigrationEngineError


class StorageError(MigrationEngineError):
    """Base class for document store errors."""

    def __init__(
        self,
        message: str,
        collection: str | None = None,
        operation: str | None = None,
        **kwargs: Any,
    ):
        """
        Initialize storage error.

        Args:
            message: Error message
            collection: Collection name involved
            operation: Storage operation that failed
            **kwargs: Additional arguments for base class
        """
        context = kwargs.pop("context", {})
        if collection:
            context["collection"] = collection
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)
        self.collection = collection
        self.operation = operation

    def _get_default_user_message(self) -> str:
        if self.operation:
            return f"Failed to {self.operation}. Please try again."
        return "Storage operation failed. Please try again."


class DuplicateKeyError(StorageError):
    """Raised when a write violates a unique index."""

    def __init__(self, message: str, collection: str | None = None, index: str | None = None, **kwargs: Any):
        context = kwargs.pop("context", {})
        if index:
            context["index"] = index
        super().__init__(message, collection=collection, operation="write document", context=context, **kwargs)
        self.index = index


class IndexNotFoundError(StorageError):
    """Raised when dropping an index that does not exist."""

    def __init__(self, name: str, collection: str | None = None, **kwargs: Any):
        super().__init__(
            f"Index '{name}' not found", collection=collection, operation="drop index", **kwargs
        )
        self.name = name


class SerializationError(StorageError):
    """Raised when a document cannot be encoded or decoded."""

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("operation", "serialize document")
        super().__init__(message, **kwargs)
