"""
Migration Interceptor

Wraps the serializer of every versioned type. Writes stamp the current target
version onto the outermost stored document; reads migrate the stored document
to the target version and strip the version field before the application type
is built, so application code never sees stale or version-tagged data.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from ..exceptions import ConfigurationError, InterceptorResolutionError
from ..serialization import (
    DocumentSerializer,
    InterceptingDocumentWriter,
    ModelSerializer,
    SerializationProvider,
    decode_document,
)
from ..serialization.codec import RawDocument
from .base import MigrationTiming
from .document_runner import DocumentMigrationRunner
from .version_locator import VersionLocator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MigrationInterceptor(ModelSerializer[T]):
    """
    Intercepts requests to deserialize a document and performs any document
    migrations required. Also sets the version field when serializing.
    """

    def __init__(
        self,
        document_type: type[T],
        version_locator: VersionLocator,
        document_migration_runner: DocumentMigrationRunner,
    ) -> None:
        super().__init__(document_type)
        self.version_locator = version_locator
        self.document_migration_runner = document_migration_runner

    def serialize(self, writer: Any, value: T) -> None:
        version = self.version_locator.get_target_version(self.document_type)
        super().serialize(self._add_version_field(writer, version), value)

    def deserialize(self, raw: RawDocument) -> T:
        version_field = self._version_field_name()
        document = decode_document(raw)

        self.document_migration_runner.migrate_document(
            document, self.document_type, MigrationTiming.ON_ACCESS
        )
        document.pop(version_field, None)

        return self.from_document(document)

    def _add_version_field(self, writer: Any, version: int) -> InterceptingDocumentWriter:
        version_field = self._version_field_name()

        # the version is not part of the object, so append it when the
        # outermost document is ended
        def write_version(inner: Any) -> None:
            inner.write_name(version_field)
            inner.write_value(version)

        intercept = InterceptingDocumentWriter(writer)
        intercept.before_end_document(write_version)
        return intercept

    def _version_field_name(self) -> str:
        version_field = self.version_locator.version_field_name()
        if not version_field:
            raise ConfigurationError(
                "Version field name cannot be set to None or empty",
                config_key="version_field_name",
            )
        return version_field


InterceptorFactory = Callable[[type], DocumentSerializer | None]


class MigrationInterceptionProvider(SerializationProvider):
    """
    Checks whether types being serialized have document migrations defined;
    if so, supplies the migration interceptor bound to that type.
    """

    def __init__(
        self,
        version_locator: VersionLocator,
        interceptor_factory: InterceptorFactory | None = None,
    ) -> None:
        self.version_locator = version_locator
        self.interceptor_factory = interceptor_factory

    def get_serializer(self, document_type: type) -> DocumentSerializer | None:
        if not self.version_locator.is_versioned(document_type):
            return None

        interceptor = None
        if self.interceptor_factory is not None:
            interceptor = self.interceptor_factory(document_type)
        if interceptor is None:
            raise InterceptorResolutionError(document_type)

        logger.debug(f"Installed migration interceptor for {document_type.__qualname__}")
        return interceptor


def bind_interceptors(
    version_locator: VersionLocator,
    document_migration_runner: DocumentMigrationRunner,
) -> InterceptorFactory:
    """Factory producing one MigrationInterceptor per versioned type."""

    def create(document_type: type) -> MigrationInterceptor:
        return MigrationInterceptor(document_type, version_locator, document_migration_runner)

    return create
