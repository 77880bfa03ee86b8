"""
Migration Exception Classes
Errors raised while building the version graph or applying migrations.
"""

import logging
from typing import Any

from .base import ConfigurationError, MigrationEngineError
from .collections import _type_name


class MigrationError(MigrationEngineError):
    """Raised when a migration step fails."""

    def __init__(
        self,
        message: str,
        version: int | None = None,
        operation: str | None = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", {})
        if version is not None:
            context["version"] = version
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)
        self.version = version
        self.operation = operation

    def _get_default_user_message(self) -> str:
        if self.operation:
            return f"Schema migration failed during {self.operation}."
        return "Schema migration failed."


class DuplicateMigrationVersionError(MigrationError):
    """Raised when two migrations in the same scope share a version number."""

    def __init__(self, document_type: Any, version: int, **kwargs: Any):
        kwargs.setdefault("log_level", logging.WARNING)
        scope = "database" if document_type is None else _type_name(document_type)
        if document_type is None:
            message = f"Multiple database migrations defined with version number {version}"
        else:
            message = (
                f"Multiple document migrations defined for type {scope} "
                f"with version number {version}"
            )

        context = kwargs.pop("context", {})
        context["scope"] = scope
        super().__init__(message, version=version, context=context, **kwargs)
        self.document_type = document_type


class InterceptorResolutionError(ConfigurationError):
    """Raised when a versioned type has no migration interceptor bound to it."""

    def __init__(self, document_type: Any, **kwargs: Any):
        context = kwargs.pop("context", {})
        context["document_type"] = _type_name(document_type)
        super().__init__(
            f"No migration interceptor has been bound for versioned type "
            f"{_type_name(document_type)}",
            context=context,
            **kwargs,
        )
        self.document_type = document_type
