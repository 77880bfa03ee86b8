"""Shared pytest fixtures for the migration engine test suite."""

from __future__ import annotations

import pytest

from doc_migrations.collections import CollectionNameResolver
from doc_migrations.migrations import DocumentMigrationRunner, VersionLocator
from doc_migrations.serialization import SerializerRegistry
from doc_migrations.storage import MemoryDocumentStore
from tests.fixtures.documents import VERSION_FIELD, Order, Unversioned, User


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Fresh in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def name_resolver() -> CollectionNameResolver:
    """Resolver with the test document types mapped."""
    return (
        CollectionNameResolver()
        .add_type(User, "users")
        .add_type(Order, "orders")
        .add_type(Unversioned, "unversioned")
    )


@pytest.fixture
def serializers() -> SerializerRegistry:
    """Serializer registry, reset after each test."""
    registry = SerializerRegistry()
    yield registry
    registry.reset()


@pytest.fixture
def make_document_runner(store, name_resolver):
    """Factory building a locator and document runner over a list of migrations."""

    def _make(migrations, version_field: str = VERSION_FIELD):
        locator = VersionLocator(migrations, version_field)
        runner = DocumentMigrationRunner(store, migrations, name_resolver, locator)
        return runner, locator

    return _make
