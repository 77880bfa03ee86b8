"""
Test document types and configurable fake migrations shared by the test suite.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from doc_migrations.migrations import DatabaseMigration, DocumentMigration, MigrationTiming


class Address(BaseModel):
    street: str = ""
    city: str = ""


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    address: Address | None = None
    previous_addresses: list[Address] = Field(default_factory=list)


class Order(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    total: float = 0.0
    status: str = ""


class Unversioned(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    value: str = ""


# Default name of the version field stored in each document
VERSION_FIELD = "_schemaVersion"

Transform = Callable[[dict[str, Any]], None]


class FakeDocumentMigration(DocumentMigration):
    """Document migration whose transforms are supplied by the test and whose calls are recorded."""

    def __init__(
        self,
        version: int,
        document_type: type = User,
        timing: MigrationTiming = MigrationTiming.AT_START,
        up: Transform | None = None,
        down: Transform | None = None,
        calls: list[tuple[int, str]] | None = None,
    ) -> None:
        self._version = version
        self._document_type = document_type
        self._timing = timing
        self._up = up
        self._down = down
        self.calls = calls if calls is not None else []

    @property
    def version(self) -> int:
        return self._version

    @property
    def document_type(self) -> type:
        return self._document_type

    @property
    def timing(self) -> MigrationTiming:
        return self._timing

    def up(self, document: dict[str, Any]) -> None:
        self.calls.append((self._version, "up"))
        if self._up:
            self._up(document)

    def down(self, document: dict[str, Any]) -> None:
        self.calls.append((self._version, "down"))
        if self._down:
            self._down(document)

    def count(self, direction: str) -> int:
        return sum(1 for version, d in self.calls if version == self._version and d == direction)


class FakeDatabaseMigration(DatabaseMigration):
    """Database migration that records its calls and can be told to fail."""

    def __init__(
        self,
        store: Any,
        version: int,
        calls: list[tuple[int, str]] | None = None,
        fail_on: str | None = None,
    ) -> None:
        super().__init__(store)
        self._version = version
        self.calls = calls if calls is not None else []
        self.fail_on = fail_on

    @property
    def version(self) -> int:
        return self._version

    def up(self) -> None:
        self.calls.append((self._version, "up"))
        if self.fail_on == "up":
            raise RuntimeError(f"migration {self._version} up failed")

    def down(self) -> None:
        self.calls.append((self._version, "down"))
        if self.fail_on == "down":
            raise RuntimeError(f"migration {self._version} down failed")


class AddUserEmailIndex(DatabaseMigration):
    """Creates a unique index on the users collection."""

    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Add unique index on user email"

    def up(self) -> None:
        self.create_index_if_not_exists("users", ["email"], name="email_1", unique=True)

    def down(self) -> None:
        self.drop_index_if_exists("users", "email_1")


class CombineUserNames(DocumentMigration):
    """Collapses first/last name into full_name."""

    @property
    def version(self) -> int:
        return 1

    @property
    def document_type(self) -> type:
        return User

    def up(self, document: dict[str, Any]) -> None:
        first = document.pop("first_name", "")
        last = document.pop("last_name", "")
        document["full_name"] = f"{first} {last}".strip()

    def down(self, document: dict[str, Any]) -> None:
        first, _, last = document.pop("full_name", "").partition(" ")
        document["first_name"] = first
        document["last_name"] = last
