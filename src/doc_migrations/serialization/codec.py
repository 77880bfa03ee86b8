"""
Document Serializers

Converts application objects (pydantic models) to and from their stored
document form. Serializers are looked up per type through a
SerializerRegistry, which consults registered providers first and falls back
to the default ModelSerializer.
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import SerializationError
from .writer import DocumentWriter, write_document

logger = logging.getLogger(__name__)

T = TypeVar("T")

RawDocument = bytes | str | Mapping[str, Any]


def encode_document(document: Mapping[str, Any]) -> bytes:
    """Encode a structured document to its raw stored form."""
    try:
        return json.dumps(document, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode document: {e}") from e


def decode_document(raw: RawDocument) -> dict[str, Any]:
    """
    Decode a raw stored document into its generic structured form.

    Mappings are deep-copied so callers can mutate the result freely.
    """
    if isinstance(raw, Mapping):
        return copy.deepcopy(dict(raw))

    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot decode document: {e}") from e

    if not isinstance(document, dict):
        raise SerializationError(f"Stored value is not a document: {type(document).__name__}")
    return document


class DocumentSerializer(ABC, Generic[T]):
    """Serializer for one application type."""

    def __init__(self, document_type: type[T]) -> None:
        self.document_type = document_type

    @abstractmethod
    def to_document(self, value: T) -> dict[str, Any]:
        pass

    @abstractmethod
    def from_document(self, document: dict[str, Any]) -> T:
        pass

    def serialize(self, writer: Any, value: T) -> None:
        write_document(writer, self.to_document(value))

    def deserialize(self, raw: RawDocument) -> T:
        return self.from_document(decode_document(raw))


class ModelSerializer(DocumentSerializer[T]):
    """Default serializer for pydantic models. Field aliases (e.g. "_id") are honoured."""

    def to_document(self, value: T) -> dict[str, Any]:
        if not isinstance(value, BaseModel):
            raise SerializationError(f"{type(value).__name__} is not a pydantic model")
        return value.model_dump(by_alias=True, mode="json")

    def from_document(self, document: dict[str, Any]) -> T:
        try:
            return self.document_type.model_validate(document)
        except PydanticValidationError as e:
            raise SerializationError(
                f"Cannot decode {self.document_type.__qualname__}: {e}",
                context={"document_type": self.document_type.__qualname__},
            ) from e


class SerializationProvider(ABC):
    """Supplies a serializer for a type, or None to defer to the next provider."""

    @abstractmethod
    def get_serializer(self, document_type: type) -> DocumentSerializer | None:
        pass


class SerializerRegistry:
    """
    Per-type serializer lookup with an explicit lifecycle.

    Providers are consulted in registration order; resolved serializers are
    cached until reset() or clear_cache() is called.
    """

    def __init__(self) -> None:
        self._providers: list[SerializationProvider] = []
        self._cache: dict[type, DocumentSerializer] = {}

    def register_provider(self, provider: SerializationProvider) -> None:
        if provider in self._providers:
            return
        self._providers.append(provider)
        self._cache.clear()
        logger.debug(f"Registered serialization provider {type(provider).__name__}")

    def reset(self) -> None:
        """Remove all providers and cached serializers."""
        self._providers.clear()
        self._cache.clear()

    def clear_cache(self) -> None:
        self._cache.clear()

    def lookup(self, document_type: type) -> DocumentSerializer:
        serializer = self._cache.get(document_type)
        if serializer is not None:
            return serializer

        for provider in self._providers:
            serializer = provider.get_serializer(document_type)
            if serializer is not None:
                break
        else:
            serializer = ModelSerializer(document_type)

        self._cache[document_type] = serializer
        return serializer

    def to_document(self, value: Any) -> dict[str, Any]:
        """Serialize an object to its structured stored form."""
        writer = DocumentWriter()
        self.lookup(type(value)).serialize(writer, value)
        return writer.document

    def encode(self, value: Any) -> bytes:
        return encode_document(self.to_document(value))

    def decode(self, document_type: type[T], raw: RawDocument) -> T:
        return self.lookup(document_type).deserialize(raw)
