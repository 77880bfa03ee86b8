"""
Migration Registry

Holds the already-built migration instances supplied by the host. The engine
never discovers migrations itself; the host registers them explicitly.
"""

import logging
from collections.abc import Iterable

from .base import DatabaseMigration, DocumentMigration

logger = logging.getLogger(__name__)


class MigrationRegistry:
    """Ordered collection of database and document migrations."""

    def __init__(
        self,
        database_migrations: Iterable[DatabaseMigration] = (),
        document_migrations: Iterable[DocumentMigration] = (),
    ) -> None:
        self._database_migrations: list[DatabaseMigration] = []
        self._document_migrations: list[DocumentMigration] = []
        for migration in database_migrations:
            self.add(migration)
        for migration in document_migrations:
            self.add(migration)

    def add(self, migration: DatabaseMigration | DocumentMigration) -> "MigrationRegistry":
        """
        Register a migration instance.

        Raises:
            TypeError: If the object is neither kind of migration
        """
        if isinstance(migration, DatabaseMigration):
            self._database_migrations.append(migration)
        elif isinstance(migration, DocumentMigration):
            self._document_migrations.append(migration)
        else:
            raise TypeError(f"Not a migration: {migration!r}")

        logger.debug(f"Registered {type(migration).__name__} version {migration.version}")
        return self

    @property
    def database_migrations(self) -> list[DatabaseMigration]:
        return list(self._database_migrations)

    @property
    def document_migrations(self) -> list[DocumentMigration]:
        return list(self._document_migrations)

    def __len__(self) -> int:
        return len(self._database_migrations) + len(self._document_migrations)
