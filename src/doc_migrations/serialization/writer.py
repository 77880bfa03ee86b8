"""
Document Writers

Serializers produce stored documents by emitting a stream of write events
(start document, name, value, end document, ...) into a DocumentWriter, which
assembles an ordered field/value tree. Writers can be wrapped so that extra
synthetic fields are appended when the outermost document is finalized.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..exceptions import SerializationError

logger = logging.getLogger(__name__)

_NO_NAME = object()


class DocumentWriter:
    """Assembles a structured document from write events."""

    def __init__(self) -> None:
        self._stack: list[dict[str, Any] | list[Any]] = []
        self._pending_name: Any = _NO_NAME
        self._document: dict[str, Any] | None = None

    @property
    def serialization_depth(self) -> int:
        """Number of documents and arrays currently open."""
        return len(self._stack)

    @property
    def document(self) -> dict[str, Any]:
        """The completed outermost document."""
        if self._document is None or self._stack:
            raise SerializationError("Document has not been completely written")
        return self._document

    def write_start_document(self) -> None:
        self._open({})

    def write_end_document(self) -> None:
        self._close(dict)

    def write_start_array(self) -> None:
        self._open([])

    def write_end_array(self) -> None:
        self._close(list)

    def write_name(self, name: str) -> None:
        if not self._stack or not isinstance(self._stack[-1], dict):
            raise SerializationError(f"Cannot write name '{name}' outside of a document")
        if self._pending_name is not _NO_NAME:
            raise SerializationError(f"Name '{self._pending_name}' has no value")
        self._pending_name = name

    def write_value(self, value: Any) -> None:
        """Write a scalar value for the pending name (or the next array item)."""
        if not self._stack:
            raise SerializationError("Cannot write a value outside of a document")
        self._attach(value)

    def _open(self, container: dict[str, Any] | list[Any]) -> None:
        if self._stack:
            self._attach(container)
        elif self._document is not None:
            raise SerializationError("Document has already been written")
        elif not isinstance(container, dict):
            raise SerializationError("Outermost value must be a document")
        else:
            self._document = container
        self._stack.append(container)

    def _close(self, kind: type) -> None:
        if not self._stack or not isinstance(self._stack[-1], kind):
            raise SerializationError(f"No open {kind.__name__} to end")
        if self._pending_name is not _NO_NAME:
            raise SerializationError(f"Name '{self._pending_name}' has no value")
        self._stack.pop()

    def _attach(self, value: Any) -> None:
        parent = self._stack[-1]
        if isinstance(parent, list):
            parent.append(value)
            return

        if self._pending_name is _NO_NAME:
            raise SerializationError("Value written without a name")
        parent[self._pending_name] = value
        self._pending_name = _NO_NAME


class DocumentWriterAdapter:
    """Delegates every write event to an inner writer."""

    def __init__(self, inner: "DocumentWriter | DocumentWriterAdapter") -> None:
        self.inner = inner

    @property
    def serialization_depth(self) -> int:
        return self.inner.serialization_depth

    @property
    def document(self) -> dict[str, Any]:
        return self.inner.document

    def write_start_document(self) -> None:
        self.inner.write_start_document()

    def write_end_document(self) -> None:
        self.inner.write_end_document()

    def write_start_array(self) -> None:
        self.inner.write_start_array()

    def write_end_array(self) -> None:
        self.inner.write_end_array()

    def write_name(self, name: str) -> None:
        self.inner.write_name(name)

    def write_value(self, value: Any) -> None:
        self.inner.write_value(value)


class InterceptingDocumentWriter(DocumentWriterAdapter):
    """
    Writer that runs an action just before the outermost document is ended.

    Nested documents and documents inside arrays are ended normally; only the
    top level document (depth 1) triggers the action.
    """

    def __init__(self, inner: "DocumentWriter | DocumentWriterAdapter") -> None:
        super().__init__(inner)
        self._action_before_end: Callable[[Any], None] | None = None

    def before_end_document(self, action: Callable[[Any], None]) -> None:
        self._action_before_end = action

    def write_end_document(self) -> None:
        if self.serialization_depth == 1 and self._action_before_end is not None:
            self._action_before_end(self.inner)

        super().write_end_document()


def write_document(writer: Any, document: Mapping[str, Any]) -> None:
    """Emit the write events for a mapping, recursing into nested documents and arrays."""
    writer.write_start_document()
    for name, value in document.items():
        writer.write_name(name)
        _write_element(writer, value)
    writer.write_end_document()


def _write_element(writer: Any, value: Any) -> None:
    if isinstance(value, Mapping):
        write_document(writer, value)
    elif isinstance(value, (list, tuple)):
        writer.write_start_array()
        for item in value:
            _write_element(writer, item)
        writer.write_end_array()
    else:
        writer.write_value(value)
