"""
Tests for the migration registry.
"""

import pytest

from doc_migrations.migrations import MigrationRegistry
from tests.fixtures.documents import FakeDatabaseMigration, FakeDocumentMigration, Order, User


class TestMigrationRegistry:
    """Test registration of migration instances."""

    def test_add_sorts_by_kind(self, store):
        """Test added migrations are sorted into database and document lists."""
        database_migration = FakeDatabaseMigration(store, 1)
        document_migration = FakeDocumentMigration(1, User)

        registry = MigrationRegistry().add(database_migration).add(document_migration)

        assert registry.database_migrations == [database_migration]
        assert registry.document_migrations == [document_migration]
        assert len(registry) == 2

    def test_constructor_accepts_both_kinds(self, store):
        """Test both lists can be passed to the constructor."""
        registry = MigrationRegistry(
            database_migrations=[FakeDatabaseMigration(store, 1), FakeDatabaseMigration(store, 2)],
            document_migrations=[FakeDocumentMigration(1, User)],
        )

        assert [m.version for m in registry.database_migrations] == [1, 2]
        assert len(registry.document_migrations) == 1

    def test_rejects_non_migrations(self):
        """Test objects that are not migrations are refused."""
        with pytest.raises(TypeError):
            MigrationRegistry().add(object())

    def test_lists_are_copies(self):
        """Test the exposed lists cannot change the registry."""
        registry = MigrationRegistry(document_migrations=[FakeDocumentMigration(1)])

        registry.document_migrations.clear()

        assert len(registry.document_migrations) == 1

    def test_migration_info(self, store):
        """Test migration info for both kinds."""
        assert FakeDatabaseMigration(store, 4).get_migration_info() == {
            "version": 4,
            "description": "FakeDatabaseMigration",
        }
        assert FakeDocumentMigration(2, Order).get_migration_info() == {
            "version": 2,
            "document_type": "Order",
            "timing": "at_start",
            "description": "FakeDocumentMigration",
        }
