"""
Version Locator

Derives the target schema version of every document type from its registered
document migrations, with optional explicit overrides.
"""

import logging
from collections import Counter
from collections.abc import Iterable

from ..config import DEFAULT_VERSION_FIELD_NAME
from ..exceptions import DuplicateMigrationVersionError, InvalidArgumentError
from .base import DocumentMigration

logger = logging.getLogger(__name__)


class VersionLocator:
    """Get the target schema version for a document type."""

    def __init__(
        self,
        migrations: Iterable[DocumentMigration],
        version_field_name: str = DEFAULT_VERSION_FIELD_NAME,
    ) -> None:
        """
        Build the target version table.

        Args:
            migrations: All registered document migrations
            version_field_name: Name of the version field in stored documents

        Raises:
            InvalidArgumentError: If a migration version is below 1
            DuplicateMigrationVersionError: If a type has two migrations with the same version
        """
        self._version_field_name = version_field_name
        self._target_versions: dict[type, int] = {}
        self.replace_target_versions(migrations)

    def get_target_version(self, document_type: type) -> int:
        return self._target_versions.get(document_type, 0)

    def set_target_version(self, document_type: type, version: int) -> "VersionLocator":
        """
        Set the target schema version for a specific type.

        By default documents are migrated to the maximum version present in
        the type's migrations; an explicit value takes precedence.
        """
        logger.info(f"Target schema version for {document_type.__qualname__} set to {version}")
        self._target_versions[document_type] = version
        return self

    def version_field_name(self) -> str:
        return self._version_field_name

    def is_versioned(self, document_type: type) -> bool:
        return self.get_target_version(document_type) > 0

    def versioned_types(self) -> list[type]:
        return [t for t, version in self._target_versions.items() if version > 0]

    def replace_target_versions(self, migrations: Iterable[DocumentMigration]) -> None:
        """Recompute target versions from a set of migrations, keeping other types untouched."""
        by_type: dict[type, list[DocumentMigration]] = {}
        for migration in migrations:
            by_type.setdefault(migration.document_type, []).append(migration)

        for document_type, type_migrations in by_type.items():
            self._check_versions(document_type, type_migrations)
            self._target_versions[document_type] = max(m.version for m in type_migrations)
            logger.debug(
                f"{document_type.__qualname__} target schema version "
                f"{self._target_versions[document_type]}"
            )

    def _check_versions(self, document_type: type, migrations: list[DocumentMigration]) -> None:
        for migration in migrations:
            if migration.version < 1:
                raise InvalidArgumentError(
                    f"Document migration {type(migration).__name__} for {document_type.__qualname__} "
                    f"has version {migration.version}; versions start at 1",
                    field="version",
                    value=migration.version,
                )

        duplicates = sorted(v for v, count in Counter(m.version for m in migrations).items() if count > 1)
        if duplicates:
            raise DuplicateMigrationVersionError(document_type, duplicates[0])
