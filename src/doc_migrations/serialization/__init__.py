"""
Serialization of application objects to stored documents.
"""

from .codec import (
    DocumentSerializer,
    ModelSerializer,
    SerializationProvider,
    SerializerRegistry,
    decode_document,
    encode_document,
)
from .writer import (
    DocumentWriter,
    DocumentWriterAdapter,
    InterceptingDocumentWriter,
    write_document,
)

__all__ = [
    "DocumentSerializer",
    "ModelSerializer",
    "SerializationProvider",
    "SerializerRegistry",
    "decode_document",
    "encode_document",
    "DocumentWriter",
    "DocumentWriterAdapter",
    "InterceptingDocumentWriter",
    "write_document",
]
