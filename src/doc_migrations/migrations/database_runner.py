"""
Database Migration Runner

Applies database level migrations in version order at application startup,
upgrading or downgrading the stored schema version one step at a time.
"""

import logging
import sys
import time
from collections import Counter
from collections.abc import Callable, Iterable
from typing import Any

from ..exceptions import DuplicateMigrationVersionError, InvalidArgumentError, MigrationError
from .base import DatabaseMigration
from .version_tracker import VersionTracker

logger = logging.getLogger(__name__)

# Target meaning "the newest registered migration"
LATEST_VERSION = sys.maxsize


class DatabaseMigrationRunner:
    """
    Executes database level migrations.

    Every successful step is persisted immediately; a failing step stops the
    run and leaves the stored version at the last completed step. There is no
    rollback of earlier steps.
    """

    def __init__(
        self,
        migrations: Iterable[DatabaseMigration],
        version_tracker: VersionTracker,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> None:
        """
        Initialize migration runner.

        Args:
            migrations: Registered database migrations
            version_tracker: Access to the stored schema version
            progress_callback: Optional callback for progress updates
                               Called with (current_step, total_steps, message)

        Raises:
            InvalidArgumentError: If a migration version is below 1
            DuplicateMigrationVersionError: If two migrations share a version
        """
        self.migrations = list(migrations)
        self.version_tracker = version_tracker
        self.progress_callback = progress_callback
        self._check_versions()

    def get_current_version(self) -> int:
        return self.version_tracker.get_current_version()

    def get_latest_version(self) -> int:
        return max((m.version for m in self.migrations), default=0)

    def run_migrations(self, target_version: int | None = None) -> dict[str, Any]:
        """
        Migrate the database schema from its current version to a target version.

        Args:
            target_version: Version to migrate to (default: latest)

        Returns:
            Dictionary with migration results

        Raises:
            MigrationError: If a migration step fails
        """
        start_time = time.time()
        target = LATEST_VERSION if target_version is None else target_version
        current_version = self.get_current_version()
        direction = self._direction(current_version, target)
        pending = self.select_migrations(current_version, target)

        result: dict[str, Any] = {
            "success": False,
            "direction": direction,
            "start_version": current_version,
            "target_version": self.get_latest_version() if target_version is None else target_version,
            "final_version": current_version,
            "migrations_applied": [],
            "execution_time_ms": 0,
        }

        if not pending:
            logger.info("Database schema already up to date. No migrations.")
            result["success"] = True
            result["direction"] = "none"
            result["execution_time_ms"] = (time.time() - start_time) * 1000
            return result

        logger.info(
            f"Applying {len(pending)} database migrations ({direction}): "
            f"{[m.version for m in pending]}"
        )

        version = current_version
        for i, migration in enumerate(pending):
            if direction == "upgrade":
                logger.info(f"Upgrading database schema from {version} to {migration.version}")
                new_version = migration.version
                operation = "up"
            else:
                logger.info(f"Downgrading database schema from {version} to {migration.version - 1}")
                new_version = migration.version - 1
                operation = "down"

            self._report_progress(i, len(pending), f"Running {operation} for migration {migration.version}")
            migration_start = time.time()
            try:
                if operation == "up":
                    migration.up()
                else:
                    migration.down()
            except Exception as e:
                result["final_version"] = version
                logger.error(
                    f"Database migration {migration.version} ({operation}) failed; "
                    f"schema left at version {version}: {e}"
                )
                raise MigrationError(
                    f"Database migration {migration.version} failed: {e}",
                    version=migration.version,
                    operation=operation,
                    context={"schema_version": version},
                ) from e

            self.version_tracker.set_version(new_version)
            version = new_version
            result["final_version"] = version
            result["migrations_applied"].append(
                {
                    "version": migration.version,
                    "operation": operation,
                    "description": migration.description,
                    "execution_time_ms": (time.time() - migration_start) * 1000,
                }
            )

        self._report_progress(len(pending), len(pending), "Database migrations completed")
        result["success"] = True
        result["execution_time_ms"] = (time.time() - start_time) * 1000
        logger.info(
            f"Completed database migrations from {current_version} to {version} "
            f"in {result['execution_time_ms']:.1f}ms"
        )
        return result

    def select_migrations(self, current_version: int, target_version: int) -> list[DatabaseMigration]:
        """Migrations needed to move from current to target, in the order they must run."""
        if target_version >= current_version:
            return sorted(
                (m for m in self.migrations if current_version < m.version <= target_version),
                key=lambda m: m.version,
            )

        return sorted(
            (m for m in self.migrations if target_version < m.version <= current_version),
            key=lambda m: m.version,
            reverse=True,
        )

    def get_migration_plan(self, target_version: int | None = None) -> dict[str, Any]:
        """
        Describe what run_migrations would do, without side effects.

        Returns:
            Dictionary with current/target versions, direction and ordered steps
        """
        target = LATEST_VERSION if target_version is None else target_version
        current_version = self.get_current_version()
        pending = self.select_migrations(current_version, target)
        return {
            "current_version": current_version,
            "target_version": self.get_latest_version() if target_version is None else target_version,
            "direction": self._direction(current_version, target) if pending else "none",
            "migrations": [m.get_migration_info() for m in pending],
        }

    @staticmethod
    def _direction(current_version: int, target_version: int) -> str:
        if target_version > current_version:
            return "upgrade"
        if target_version < current_version:
            return "downgrade"
        return "none"

    def _check_versions(self) -> None:
        for migration in self.migrations:
            if migration.version < 1:
                raise InvalidArgumentError(
                    f"Database migration {type(migration).__name__} has version "
                    f"{migration.version}; versions start at 1",
                    field="version",
                    value=migration.version,
                )

        counts = Counter(m.version for m in self.migrations)
        duplicates = sorted(v for v, count in counts.items() if count > 1)
        if duplicates:
            raise DuplicateMigrationVersionError(None, duplicates[0])

    def _report_progress(self, current: int, total: int, message: str) -> None:
        """Report progress to callback if available."""
        if self.progress_callback:
            try:
                self.progress_callback(current, total, message)
            except Exception as e:
                logger.warning(f"Progress callback error: {e}")

        logger.debug(f"Progress: {current}/{total} - {message}")
