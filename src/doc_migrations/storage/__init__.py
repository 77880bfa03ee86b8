"""
Document store boundary and the in-memory reference store.
"""

from .interfaces import Document, DocumentCollection, DocumentStore, Filter
from .memory import ID_FIELD, MemoryCollection, MemoryDocumentStore
from .typed import TypedCollection

__all__ = [
    "Document",
    "DocumentCollection",
    "DocumentStore",
    "Filter",
    "ID_FIELD",
    "MemoryCollection",
    "MemoryDocumentStore",
    "TypedCollection",
]
