"""
Migration Engine Configuration

Type-safe settings for the migration engine, loaded from the environment
(and an optional .env file) with sensible defaults.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default name of the version field injected into stored documents
DEFAULT_VERSION_FIELD_NAME = "_schemaVersion"

# Default collection holding the single database schema version record
DEFAULT_SCHEMA_VERSION_COLLECTION = "SchemaVersion"

# Fixed identity of the database schema version record
SCHEMA_VERSION_ID = "5d6d0977-eb1e-4d15-84f4-6535a411f306"

ENV_PREFIX = "DOC_MIGRATIONS_"


@dataclass
class MigrationSettings:
    """Migration engine settings."""

    version_field_name: str = DEFAULT_VERSION_FIELD_NAME
    schema_version_collection: str = DEFAULT_SCHEMA_VERSION_COLLECTION
    run_document_migrations_at_start: bool = True

    def validate(self) -> list[str]:
        """Validate settings and return a list of issues (empty if valid)."""
        issues = []

        if not self.version_field_name or not self.version_field_name.strip():
            issues.append("Version field name cannot be empty")
        elif self.version_field_name == "_id":
            issues.append("Version field name cannot be the document identity field")
        elif "." in self.version_field_name:
            issues.append("Version field name cannot contain '.'")

        if not self.schema_version_collection or not self.schema_version_collection.strip():
            issues.append("Schema version collection name cannot be empty")

        return issues

    def ensure_valid(self) -> "MigrationSettings":
        """
        Raise if the settings are not usable.

        Raises:
            ConfigurationError: If validation reports any issue
        """
        issues = self.validate()
        if issues:
            raise ConfigurationError(
                f"Invalid migration settings: {'; '.join(issues)}",
                context={"issues": issues},
            )
        return self

    @classmethod
    def from_environment(cls, dotenv: bool = True) -> "MigrationSettings":
        """
        Load settings from environment variables.

        Args:
            dotenv: Whether to load a .env file first

        Returns:
            MigrationSettings populated from DOC_MIGRATIONS_* variables
        """
        if dotenv:
            load_dotenv()

        settings = cls(
            version_field_name=os.getenv(
                f"{ENV_PREFIX}VERSION_FIELD", DEFAULT_VERSION_FIELD_NAME
            ),
            schema_version_collection=os.getenv(
                f"{ENV_PREFIX}SCHEMA_COLLECTION", DEFAULT_SCHEMA_VERSION_COLLECTION
            ),
            run_document_migrations_at_start=os.getenv(
                f"{ENV_PREFIX}AT_START", "true"
            ).lower()
            == "true",
        )
        logger.debug(f"Loaded migration settings: {settings}")
        return settings
