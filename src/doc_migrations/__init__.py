"""
Document Schema Migrations

Keeps a document store and every stored document at the schema version the
application expects, by applying ordered up/down migrations either eagerly at
startup or lazily as documents are read.
"""

from .collections import CollectionNameResolver
from .config import MigrationSettings
from .engine import MigrationEngine
from .migrations import (
    DatabaseMigration,
    DocumentMigration,
    MigrationRegistry,
    MigrationTiming,
)
from .storage import MemoryDocumentStore

__all__ = [
    "CollectionNameResolver",
    "MigrationSettings",
    "MigrationEngine",
    "DatabaseMigration",
    "DocumentMigration",
    "MigrationRegistry",
    "MigrationTiming",
    "MemoryDocumentStore",
]

__version__ = "0.1.0"
