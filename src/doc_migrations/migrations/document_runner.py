"""
Document Migration Runner

Migrates individual documents to the target schema version of their type.
Runs in bulk over whole collections at application start, and one document at
a time when a document is read.
"""

import logging
from collections.abc import Iterable
from typing import Any

from ..collections import CollectionNameResolver
from ..storage import ID_FIELD, DocumentStore
from .base import DocumentMigration, MigrationTiming
from .version_locator import VersionLocator

logger = logging.getLogger(__name__)


def select_migrations(
    stored_version: int,
    target_version: int,
    candidates: Iterable[DocumentMigration],
) -> list[DocumentMigration]:
    """
    Pick the migrations that move a document from its stored version to the target.

    Upgrades run ascending through up(); downgrades run descending through down().
    """
    if stored_version == target_version:
        return []

    if stored_version < target_version:
        return sorted(
            (m for m in candidates if stored_version < m.version <= target_version),
            key=lambda m: m.version,
        )

    return sorted(
        (m for m in candidates if target_version < m.version <= stored_version),
        key=lambda m: m.version,
        reverse=True,
    )


class DocumentMigrationRunner:
    """
    Applies document migrations to stored documents.

    AT_START runs only consider migrations up to the highest AT_START version
    of a type, so ON_ACCESS migrations beyond it are left for lazy migration.
    ON_ACCESS runs consider every migration of the type.
    """

    def __init__(
        self,
        store: DocumentStore,
        migrations: Iterable[DocumentMigration],
        name_resolver: CollectionNameResolver,
        version_locator: VersionLocator,
    ) -> None:
        self.store = store
        self.migrations = list(migrations)
        self.name_resolver = name_resolver
        self.version_locator = version_locator

    def migrate_all_types(self, timing: MigrationTiming) -> dict[type, int | None]:
        """
        Bulk migrate every type with migrations eligible for the timing.

        A failure in one type is logged and does not stop the other types.

        Returns:
            Mapping of type to migrated document count (None when the type failed)
        """
        results: dict[type, int | None] = {}
        for document_type in self.get_types_to_be_migrated(timing):
            try:
                results[document_type] = self.migrate_type(document_type, timing)
            except Exception:
                logger.warning(
                    f"Failed to run document migration for type {document_type.__qualname__}",
                    exc_info=True,
                )
                results[document_type] = None

        return results

    def get_types_to_be_migrated(self, timing: MigrationTiming) -> list[type]:
        migrations = self.migrations
        if timing == MigrationTiming.AT_START:
            migrations = [m for m in migrations if m.timing == MigrationTiming.AT_START]

        return list(dict.fromkeys(m.document_type for m in migrations))

    def migrate_type(self, document_type: type, timing: MigrationTiming) -> int:
        """
        Migrate every stored document of a type that is not at the target version.

        Documents are streamed from the store and replaced one at a time.

        Returns:
            Number of documents written back
        """
        target_version = self.version_locator.get_target_version(document_type)
        collection = self.store.get_collection(self.name_resolver.get_collection_name(document_type))
        version_field = self.version_locator.version_field_name()
        type_migrations = self.get_migrations_for_type(document_type, timing)
        effective_target = self._effective_target(document_type, timing, target_version)

        migrated_docs = 0
        started = False
        for document in collection.find({version_field: {"$ne": target_version}}):
            starting_version = self.get_document_version(document)
            if not self.apply_migrations(document, type_migrations, effective_target):
                continue

            if not started:
                logger.info(
                    f"Starting document migration for type {document_type.__qualname__} "
                    f"from version {starting_version} to {effective_target}"
                )
                started = True

            if not collection.replace_by_id(document[ID_FIELD], document):
                logger.warning(
                    f"Document {document[ID_FIELD]!r} in {collection.name} disappeared "
                    f"during migration; skipping"
                )
                continue
            migrated_docs += 1

        if migrated_docs > 0:
            logger.info(f"Migrated {migrated_docs} {document_type.__qualname__} documents")
        else:
            logger.debug(f"No {document_type.__qualname__} documents required migration")

        return migrated_docs

    def get_migrations_for_type(self, document_type: type, timing: MigrationTiming) -> list[DocumentMigration]:
        type_migrations = [m for m in self.migrations if m.document_type == document_type]
        if timing == MigrationTiming.ON_ACCESS:
            return type_migrations

        cap = self._max_at_start_version(type_migrations)
        if cap is None:
            return []
        return [m for m in type_migrations if m.version <= cap]

    def migrate_document(
        self,
        document: dict[str, Any],
        document_type: type,
        timing: MigrationTiming,
    ) -> int:
        """
        Apply migrations to bring a document to the current target version of its type.

        Does not save to the store; only the document passed in is updated.

        Returns:
            Number of migrations applied
        """
        target_version = self.version_locator.get_target_version(document_type)
        if self.get_document_version(document) == target_version:
            return 0

        type_migrations = self.get_migrations_for_type(document_type, timing)
        effective_target = self._effective_target(document_type, timing, target_version)
        return self.apply_migrations(document, type_migrations, effective_target)

    def apply_migrations(
        self,
        document: dict[str, Any],
        type_migrations: list[DocumentMigration],
        target_version: int,
    ) -> int:
        """Run the selected up/down steps, updating the version field after each one."""
        version_field = self.version_locator.version_field_name()
        starting_version = self.get_document_version(document)
        required = select_migrations(starting_version, target_version, type_migrations)

        for migration in required:
            if target_version > starting_version:
                migration.up(document)
                document[version_field] = migration.version
            else:
                migration.down(document)
                document[version_field] = migration.version - 1

        if required:
            logger.debug(
                f"Migrated document from {starting_version} to {document[version_field]}"
            )
        return len(required)

    def get_document_version(self, document: dict[str, Any]) -> int:
        return int(document.get(self.version_locator.version_field_name(), 0))

    def _effective_target(self, document_type: type, timing: MigrationTiming, target_version: int) -> int:
        if timing == MigrationTiming.ON_ACCESS:
            return target_version

        type_migrations = [m for m in self.migrations if m.document_type == document_type]
        cap = self._max_at_start_version(type_migrations)
        if cap is None:
            return target_version
        return min(target_version, cap)

    @staticmethod
    def _max_at_start_version(type_migrations: list[DocumentMigration]) -> int | None:
        return max(
            (m.version for m in type_migrations if m.timing == MigrationTiming.AT_START),
            default=None,
        )
