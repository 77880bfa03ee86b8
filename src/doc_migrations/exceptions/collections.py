"""
Collection Mapping Exception Classes
Handles errors raised while mapping document types to storage collections.
"""

from typing import Any

from .base import MigrationEngineError


def _type_name(document_type: Any) -> str:
    return getattr(document_type, "__qualname__", str(document_type))


class CollectionMappingError(MigrationEngineError):
    """Base class for document type to collection mapping errors."""

    def __init__(self, message: str, document_type: Any = None, **kwargs: Any):
        context = kwargs.pop("context", {})
        if document_type is not None:
            context["document_type"] = _type_name(document_type)

        super().__init__(message, context=context, **kwargs)
        self.document_type = document_type


class MissingMappingError(CollectionMappingError):
    """Raised when a document type has no collection name registered."""

    default_user_message = "Storage collection is not configured for this document type."

    def __init__(self, document_type: Any, **kwargs: Any):
        super().__init__(
            f"{_type_name(document_type)} does not have a mapping to a collection name configured",
            document_type=document_type,
            **kwargs,
        )


class DuplicateMappingError(CollectionMappingError):
    """Raised when a document type is mapped to a collection more than once."""

    def __init__(self, document_type: Any, existing_name: str, **kwargs: Any):
        context = kwargs.pop("context", {})
        context["existing_collection"] = existing_name
        super().__init__(
            f"{_type_name(document_type)} is already mapped to collection '{existing_name}'",
            document_type=document_type,
            context=context,
            **kwargs,
        )
        self.existing_name = existing_name
