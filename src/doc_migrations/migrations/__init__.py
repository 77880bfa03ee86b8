"""
Schema Migration System

Database level migrations run once at startup against the whole store;
document migrations transform individual documents of one type, either in
bulk at startup or lazily when a document is read.
"""

from .base import DatabaseMigration, DocumentMigration, MigrationTiming, SchemaVersion
from .database_runner import LATEST_VERSION, DatabaseMigrationRunner
from .document_runner import DocumentMigrationRunner, select_migrations
from .interceptor import MigrationInterceptionProvider, MigrationInterceptor, bind_interceptors
from .registry import MigrationRegistry
from .version_locator import VersionLocator
from .version_tracker import VersionTracker

__all__ = [
    "DatabaseMigration",
    "DocumentMigration",
    "MigrationTiming",
    "SchemaVersion",
    "LATEST_VERSION",
    "DatabaseMigrationRunner",
    "DocumentMigrationRunner",
    "select_migrations",
    "MigrationInterceptionProvider",
    "MigrationInterceptor",
    "bind_interceptors",
    "MigrationRegistry",
    "VersionLocator",
    "VersionTracker",
]
