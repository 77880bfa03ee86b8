"""
Exception Hierarchy for the document migration engine.
Provides standardized error handling with consistent exception types.
"""

from .base import (
    ConfigurationError,
    InvalidArgumentError,
    MigrationEngineError,
    ValidationError,
)
from .collections import (
    CollectionMappingError,
    DuplicateMappingError,
    MissingMappingError,
)
from .migration import (
    DuplicateMigrationVersionError,
    InterceptorResolutionError,
    MigrationError,
)
from .storage import (
    DuplicateKeyError,
    IndexNotFoundError,
    SerializationError,
    StorageError,
)

__all__ = [
    # Base exceptions
    "MigrationEngineError",
    "ValidationError",
    "InvalidArgumentError",
    "ConfigurationError",
    # Collection mapping exceptions
    "CollectionMappingError",
    "MissingMappingError",
    "DuplicateMappingError",
    # Migration exceptions
    "MigrationError",
    "DuplicateMigrationVersionError",
    "InterceptorResolutionError",
    # Storage exceptions
    "StorageError",
    "DuplicateKeyError",
    "IndexNotFoundError",
    "SerializationError",
]
