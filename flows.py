from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from api import BookRecord, BooksClient, LibraryError, NetworkError
from dispatch import ImmediateDispatcher
from state import CollectionStore, Notifier

logger = logging.getLogger(__name__)

TRUE_STRINGS = {"1", "true", "yes", "on", "y"}


class FieldKind(Enum):
    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class EditableField:
    name: str
    attr: str
    kind: FieldKind
    label: str
    required: bool = True


EDITABLE_FIELDS: Dict[str, EditableField] = {
    field.name: field
    for field in (
        EditableField("title", "title", FieldKind.TEXT, "Title"),
        EditableField("author", "author", FieldKind.TEXT, "Author"),
        EditableField("genre", "genre", FieldKind.TEXT, "Genre"),
        EditableField("pageCount", "page_count", FieldKind.INTEGER, "Page Count"),
        EditableField("description", "description", FieldKind.TEXT, "Description"),
        EditableField("read", "read", FieldKind.BOOLEAN, "Already read?", required=False),
    )
}


class ValidationError(LibraryError):
    """The edit draft is missing required values; ``fields`` maps name -> message."""

    def __init__(self, fields: Dict[str, str]):
        super().__init__("Please fill in: " + ", ".join(sorted(fields)))
        self.fields = fields


class FlowStateError(LibraryError):
    """An action that needs an armed flow was invoked while idle."""


def coerce_value(kind: FieldKind, value: Any) -> Any:
    if kind is FieldKind.INTEGER:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except (TypeError, ValueError):
            return None
    if kind is FieldKind.BOOLEAN:
        if isinstance(value, str):
            return value.strip().lower() in TRUE_STRINGS
        return bool(value)
    return "" if value is None else str(value)


def validate_draft(draft: BookRecord) -> None:
    """Raise :class:`ValidationError` unless every required field is usable."""
    problems: Dict[str, str] = {}
    for field in EDITABLE_FIELDS.values():
        if not field.required:
            continue
        value = getattr(draft, field.attr)
        if field.kind is FieldKind.INTEGER:
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                problems[field.name] = f"{field.label} must be a positive whole number."
        elif not str(value or "").strip():
            problems[field.name] = f"{field.label} is required."
    if problems:
        raise ValidationError(problems)


class _Flow(Notifier):
    def __init__(self, client: BooksClient, store: CollectionStore, dispatcher: Any = None):
        super().__init__()
        self._client = client
        self._store = store
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self.target: Optional[BookRecord] = None
        self.pending = False
        self.error_message: Optional[str] = None

    @property
    def armed(self) -> bool:
        return self.target is not None

    def _require_armed(self, action: str) -> BookRecord:
        if self.target is None:
            raise FlowStateError(f"Cannot {action} without a selected book.")
        return self.target

    def _submit(self, job, target: BookRecord) -> None:
        self.pending = True
        self.error_message = None
        self._notify()
        self._dispatcher.submit(
            job,
            lambda _result: self._on_success(target),
            lambda error: self._on_failure(target, error),
        )

    def _on_success(self, target: BookRecord) -> None:
        self.pending = False
        # A different book may have been armed while the request was in flight.
        if self.target is target:
            self._disarm()
        self._notify()
        self._store.refresh()

    def _on_failure(self, target: BookRecord, error: NetworkError) -> None:
        logger.warning("%s failed for book %s: %s", type(self).__name__, target.id, error)
        self.pending = False
        if self.target is target:
            self.error_message = error.message
        self._notify()

    def _disarm(self) -> None:
        self.target = None
        self.error_message = None


class DeleteFlow(_Flow):
    """Confirm-before-delete flow for a single book."""

    def arm(self, record: BookRecord) -> None:
        self.target = record
        self.error_message = None
        self._notify()

    def cancel(self) -> None:
        if not self.armed:
            return
        self._disarm()
        self._notify()

    def confirm(self) -> None:
        target = self._require_armed("delete")
        if self.pending:
            return
        self._submit(lambda: self._client.delete_book(target.id), target)


class EditFlow(_Flow):
    """Edit flow: a draft copy of the armed book, validated before it is saved."""

    def __init__(self, client: BooksClient, store: CollectionStore, dispatcher: Any = None):
        super().__init__(client, store, dispatcher)
        self.draft: Optional[BookRecord] = None
        self.validation_error: Optional[ValidationError] = None

    def arm(self, record: BookRecord) -> None:
        self.target = record
        self.draft = dataclasses.replace(record)
        self.error_message = None
        self.validation_error = None
        self._notify()

    def update_field(self, name: str, value: Any) -> None:
        self._require_armed("edit")
        field = EDITABLE_FIELDS[name]
        setattr(self.draft, field.attr, coerce_value(field.kind, value))
        self._notify()

    def update_fields(self, values: Dict[str, Any]) -> None:
        """Apply several field values, notifying listeners once."""
        self._require_armed("edit")
        fields = [EDITABLE_FIELDS[name] for name in values]
        for field, value in zip(fields, values.values()):
            setattr(self.draft, field.attr, coerce_value(field.kind, value))
        self._notify()

    def cancel(self) -> None:
        if not self.armed:
            return
        self._disarm()
        self._notify()

    def save(self) -> bool:
        """Send the draft if it is valid. Returns False when validation fails."""
        target = self._require_armed("save")
        if self.pending:
            return False
        draft = dataclasses.replace(self.draft, id=target.id)
        try:
            validate_draft(draft)
        except ValidationError as error:
            self.validation_error = error
            self._notify()
            return False
        self.validation_error = None
        self._submit(lambda: self._client.update_book(draft), target)
        return True

    def _disarm(self) -> None:
        super()._disarm()
        self.draft = None
        self.validation_error = None
