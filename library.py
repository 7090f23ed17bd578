from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from api import BookRecord, BooksClient
from config import settings
from dispatch import ImmediateDispatcher
from flows import DeleteFlow, EditFlow
from state import CollectionStore

EMPTY_MESSAGE = "No books found."


@dataclass(frozen=True)
class ViewState:
    """Everything the presentation layer needs for one render pass."""

    banner: Optional[str] = None
    placeholders: int = 0
    cards: Tuple[BookRecord, ...] = ()
    empty_message: Optional[str] = None
    confirm_target: Optional[BookRecord] = None
    confirm_error: Optional[str] = None
    edit_target: Optional[BookRecord] = None
    edit_draft: Optional[BookRecord] = None
    edit_error: Optional[str] = None
    invalid_fields: Dict[str, str] = field(default_factory=dict)
    busy: bool = False


class LibraryController:
    """Owns the collection store and both mutation flows for one mounted view."""

    def __init__(
        self,
        client: Optional[BooksClient] = None,
        *,
        dispatcher: Any = None,
        placeholder_count: Optional[int] = None,
    ):
        self.client = client or BooksClient()
        self.dispatcher = dispatcher or ImmediateDispatcher()
        self.placeholder_count = (
            settings.placeholder_count if placeholder_count is None else placeholder_count
        )
        self.store = CollectionStore(self.client, self.dispatcher)
        self.delete_flow = DeleteFlow(self.client, self.store, self.dispatcher)
        self.edit_flow = EditFlow(self.client, self.store, self.dispatcher)
        self._unsubscribers: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def mount(self, listener: Optional[Callable[[], None]] = None) -> None:
        if listener is not None:
            for source in (self.store, self.delete_flow, self.edit_flow):
                self._unsubscribers.append(source.subscribe(listener))
        self.store.refresh()

    def unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.client.close()

    # ------------------------------------------------------------------
    # Callbacks handed to cards and dialogs
    # ------------------------------------------------------------------
    def on_edit(self, record: BookRecord) -> None:
        self.edit_flow.arm(record)

    def on_delete(self, record: BookRecord) -> None:
        self.delete_flow.arm(record)

    def on_save(self, draft: Optional[Dict[str, Any]] = None) -> bool:
        """Apply any field values in ``draft`` and save the edit."""
        if draft:
            self.edit_flow.update_fields(draft)
        return self.edit_flow.save()

    def on_close_edit(self) -> None:
        self.edit_flow.cancel()

    def on_confirm(self) -> None:
        self.delete_flow.confirm()

    def on_close_delete(self) -> None:
        self.delete_flow.cancel()

    # ------------------------------------------------------------------
    def view_state(self) -> ViewState:
        store = self.store
        show_placeholders = store.is_loading and not store.loaded
        cards: Tuple[BookRecord, ...] = () if show_placeholders else tuple(store.items)
        empty = not show_placeholders and not store.items

        delete_flow = self.delete_flow
        edit_flow = self.edit_flow
        invalid = edit_flow.validation_error.fields if edit_flow.validation_error else {}
        return ViewState(
            banner=store.error_message,
            placeholders=self.placeholder_count if show_placeholders else 0,
            cards=cards,
            empty_message=EMPTY_MESSAGE if empty else None,
            confirm_target=delete_flow.target,
            confirm_error=delete_flow.error_message,
            edit_target=edit_flow.target,
            edit_draft=edit_flow.draft,
            edit_error=edit_flow.error_message,
            invalid_fields=dict(invalid),
            busy=delete_flow.pending or edit_flow.pending,
        )
