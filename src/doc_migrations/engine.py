"""
Migration Engine

Wires the resolver, version locator, runners and interceptor together and
exposes the operations a host needs at startup and at runtime.
"""

import logging
from typing import Any, TypeVar

from .collections import CollectionNameResolver
from .config import MigrationSettings
from .migrations import (
    DatabaseMigrationRunner,
    DocumentMigrationRunner,
    MigrationInterceptionProvider,
    MigrationRegistry,
    MigrationTiming,
    VersionLocator,
    VersionTracker,
    bind_interceptors,
)
from .serialization import SerializerRegistry
from .storage import DocumentStore, TypedCollection

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MigrationEngine:
    """
    Host facade for the migration engine.

    Typical startup:
        engine = MigrationEngine(store, registry, resolver)
        engine.run_startup_migrations()
        users = engine.typed_collection(User)
    """

    def __init__(
        self,
        store: DocumentStore,
        registry: MigrationRegistry,
        name_resolver: CollectionNameResolver,
        settings: MigrationSettings | None = None,
        serializers: SerializerRegistry | None = None,
    ) -> None:
        """
        Build the engine.

        Raises:
            ConfigurationError: If the settings are invalid
            DuplicateMigrationVersionError: If two migrations in one scope share a version
        """
        self.settings = (settings or MigrationSettings()).ensure_valid()
        self.store = store
        self.registry = registry
        self.name_resolver = name_resolver
        self.serializers = serializers or SerializerRegistry()

        self.version_locator = VersionLocator(
            registry.document_migrations, self.settings.version_field_name
        )
        self.version_tracker = VersionTracker(store, self.settings.schema_version_collection)
        self.database_runner = DatabaseMigrationRunner(
            registry.database_migrations, self.version_tracker
        )
        self.document_runner = DocumentMigrationRunner(
            store, registry.document_migrations, name_resolver, self.version_locator
        )
        self.interception_provider = MigrationInterceptionProvider(
            self.version_locator,
            bind_interceptors(self.version_locator, self.document_runner),
        )

    def install_interceptors(self, serializers: SerializerRegistry | None = None) -> SerializerRegistry:
        """Register the interception provider with a serializer registry (the engine's own by default)."""
        target = serializers or self.serializers
        target.register_provider(self.interception_provider)
        return target

    def set_target_version(self, document_type: type, version: int) -> "MigrationEngine":
        """Override the target version of a type; cached serializers are dropped."""
        self.version_locator.set_target_version(document_type, version)
        self.serializers.clear_cache()
        return self

    def run_database_migrations(self, target_version: int | None = None) -> dict[str, Any]:
        return self.database_runner.run_migrations(target_version)

    def migrate_all_document_types(self, timing: MigrationTiming) -> dict[type, int | None]:
        return self.document_runner.migrate_all_types(timing)

    def migrate_document(self, document: dict[str, Any], document_type: type, timing: MigrationTiming) -> int:
        return self.document_runner.migrate_document(document, document_type, timing)

    def run_startup_migrations(self) -> dict[str, Any]:
        """
        Run database and eager document migrations, in that order.

        Database migrations must complete before any document pass, since
        document migrations may rely on structures they create.
        """
        self.install_interceptors()

        database_result = self.run_database_migrations()
        documents_result: dict[type, int | None] = {}
        if self.settings.run_document_migrations_at_start:
            documents_result = self.migrate_all_document_types(MigrationTiming.AT_START)
        else:
            logger.info("Startup document migrations disabled; documents migrate on access")

        logger.info("Completed startup migrations")
        return {"database": database_result, "documents": documents_result}

    def typed_collection(self, document_type: type[T]) -> TypedCollection[T]:
        collection = self.store.get_collection(self.name_resolver.get_collection_name(document_type))
        return TypedCollection(collection, document_type, self.serializers)
