"""
Tests for version stamping on write and lazy migration on read.
"""

import pytest
from pydantic import BaseModel, ConfigDict, Field

from doc_migrations.exceptions import ConfigurationError, InterceptorResolutionError
from doc_migrations.migrations import (
    MigrationInterceptionProvider,
    MigrationInterceptor,
    MigrationTiming,
    bind_interceptors,
)
from doc_migrations.serialization import DocumentWriter, ModelSerializer
from tests.fixtures.documents import (
    VERSION_FIELD,
    Address,
    CombineUserNames,
    FakeDocumentMigration,
    Unversioned,
    User,
)


class StrictUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str = Field(alias="_id")
    name: str = ""


@pytest.fixture
def install(make_document_runner, serializers):
    """Wire an interception provider for the given migrations into the serializer registry."""

    def _install(migrations, version_field=VERSION_FIELD):
        runner, locator = make_document_runner(migrations, version_field)
        provider = MigrationInterceptionProvider(locator, bind_interceptors(locator, runner))
        serializers.register_provider(provider)
        return locator

    return _install


class TestVersionStamping:
    """Test that writes record the target version on the outermost document only."""

    def test_outermost_document_stamped(self, install, serializers):
        """Test the version is written on the outermost document only."""
        install([FakeDocumentMigration(1), FakeDocumentMigration(2)])
        user = User(
            id="u1",
            address=Address(street="1 Main St", city="Springfield"),
            previous_addresses=[Address(street="2 Elm St"), Address(street="3 Oak St")],
        )

        document = serializers.to_document(user)

        assert document[VERSION_FIELD] == 2
        assert VERSION_FIELD not in document["address"]
        assert all(VERSION_FIELD not in address for address in document["previous_addresses"])
        assert list(document)[-1] == VERSION_FIELD

    def test_unversioned_type_not_stamped(self, install, serializers):
        """Test types without migrations get no version field."""
        install([FakeDocumentMigration(1, User)])

        document = serializers.to_document(Unversioned(id="x", value="v"))

        assert document == {"_id": "x", "value": "v"}
        assert type(serializers.lookup(Unversioned)) is ModelSerializer

    def test_stamp_follows_target_override(self, install, serializers):
        """Test the stamp uses an overridden target version."""
        locator = install([FakeDocumentMigration(1), FakeDocumentMigration(2)])
        locator.set_target_version(User, 1)

        assert serializers.to_document(User(id="u1"))[VERSION_FIELD] == 1

    def test_custom_version_field(self, install, serializers):
        """Test writes use the configured version field."""
        install([FakeDocumentMigration(1)], version_field="_v")

        document = serializers.to_document(User(id="u1"))

        assert document["_v"] == 1
        assert VERSION_FIELD not in document

    def test_empty_version_field_rejected_on_write(self, install, serializers):
        """Test writing fails without a version field name."""
        install([FakeDocumentMigration(1)], version_field="")

        with pytest.raises(ConfigurationError):
            serializers.to_document(User(id="u1"))

    def test_interceptor_writes_through_given_writer(self, make_document_runner):
        """Test serialization goes through the writer it is handed."""
        runner, locator = make_document_runner([FakeDocumentMigration(3)])
        interceptor = MigrationInterceptor(User, locator, runner)
        writer = DocumentWriter()

        interceptor.serialize(writer, User(id="u1"))

        assert writer.document[VERSION_FIELD] == 3
        assert writer.serialization_depth == 0


class TestLazyMigration:
    """Test that reads migrate stale documents and hide the version field."""

    def test_stale_document_migrated_on_read(self, install, serializers):
        """Test a stale document is migrated when read."""
        install([CombineUserNames()])
        raw = {"_id": "u1", "first_name": "Ada", "last_name": "Lovelace"}

        user = serializers.decode(User, raw)

        assert user.full_name == "Ada Lovelace"
        assert user.first_name == ""
        assert raw == {"_id": "u1", "first_name": "Ada", "last_name": "Lovelace"}

    def test_read_from_encoded_bytes(self, install, serializers):
        """Test reads accept encoded documents."""
        install([CombineUserNames()])

        user = serializers.decode(User, b'{"_id":"u1","first_name":"Ada","last_name":"Lovelace"}')

        assert user.full_name == "Ada Lovelace"

    def test_current_document_not_migrated(self, install, serializers):
        """Test a current document is read without running migrations."""
        migration = FakeDocumentMigration(1)
        install([migration])

        serializers.decode(User, {"_id": "u1", VERSION_FIELD: 1})

        assert migration.calls == []

    def test_version_field_stripped_before_model_is_built(self, install, serializers):
        """Test the model never sees the version field."""
        install([FakeDocumentMigration(1, StrictUser)])

        user = serializers.decode(StrictUser, {"_id": "s1", "name": "n", VERSION_FIELD: 1})

        assert user == StrictUser(id="s1", name="n")

    def test_on_access_migrations_run_on_read(self, install, serializers):
        """Test ON_ACCESS steps run on read."""
        def add_name(document):
            document["name"] = "migrated"

        install(
            [
                FakeDocumentMigration(1, StrictUser),
                FakeDocumentMigration(2, StrictUser, timing=MigrationTiming.ON_ACCESS, up=add_name),
            ]
        )

        user = serializers.decode(StrictUser, {"_id": "s1", VERSION_FIELD: 1})

        assert user.name == "migrated"

    def test_empty_version_field_rejected_on_read(self, install, serializers):
        """Test reading fails without a version field name."""
        install([FakeDocumentMigration(1)], version_field="")

        with pytest.raises(ConfigurationError):
            serializers.decode(User, {"_id": "u1"})

    def test_round_trip_through_interceptor(self, install, serializers):
        """Test a written model reads back equal."""
        install([CombineUserNames()])
        user = User(id="u1", full_name="Grace Hopper")

        assert serializers.decode(User, serializers.encode(user)) == user


class TestInterceptionProvider:
    """Test interceptor resolution for versioned and unversioned types."""

    def test_unversioned_type_gets_no_interceptor(self, make_document_runner):
        """Test the provider defers for unversioned types."""
        runner, locator = make_document_runner([FakeDocumentMigration(1, User)])
        provider = MigrationInterceptionProvider(locator, bind_interceptors(locator, runner))

        assert provider.get_serializer(Unversioned) is None

    def test_versioned_type_gets_interceptor(self, make_document_runner):
        """Test the provider wraps versioned types."""
        runner, locator = make_document_runner([FakeDocumentMigration(1, User)])
        provider = MigrationInterceptionProvider(locator, bind_interceptors(locator, runner))

        interceptor = provider.get_serializer(User)

        assert isinstance(interceptor, MigrationInterceptor)
        assert interceptor.document_type is User

    def test_missing_factory_raises(self, make_document_runner):
        """Test a versioned type with no factory is an error."""
        _, locator = make_document_runner([FakeDocumentMigration(1, User)])
        provider = MigrationInterceptionProvider(locator)

        with pytest.raises(InterceptorResolutionError) as exc_info:
            provider.get_serializer(User)

        assert exc_info.value.document_type is User

    def test_factory_returning_none_raises(self, make_document_runner):
        """Test a factory that builds nothing is an error."""
        _, locator = make_document_runner([FakeDocumentMigration(1, User)])
        provider = MigrationInterceptionProvider(locator, lambda document_type: None)

        with pytest.raises(InterceptorResolutionError):
            provider.get_serializer(User)
