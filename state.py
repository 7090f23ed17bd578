from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from api import BookRecord, BooksClient, NetworkError
from dispatch import ImmediateDispatcher

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class Notifier:
    """Keeps zero-argument listeners and calls them after each state change."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()


class CollectionStore(Notifier):
    """Local copy of the book collection plus its loading/error flags.

    Only :meth:`refresh` writes ``items``, ``is_loading`` and ``error_message``.
    Each refresh takes a new generation number and results from a superseded
    refresh are dropped, so the newest call always decides the final state.
    """

    def __init__(self, client: BooksClient, dispatcher: Any = None):
        super().__init__()
        self._client = client
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._generation = 0
        self.items: List[BookRecord] = []
        self.is_loading = False
        self.error_message: Optional[str] = None
        self.loaded = False

    def refresh(self) -> None:
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error_message = None
        self._notify()
        self._dispatcher.submit(
            self._client.list_books,
            lambda books: self._on_loaded(generation, books),
            lambda error: self._on_failed(generation, error),
        )

    def _on_loaded(self, generation: int, books: List[BookRecord]) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale refresh %s", generation)
            return
        self.items = list(books)
        self.loaded = True
        self.is_loading = False
        self._notify()

    def _on_failed(self, generation: int, error: NetworkError) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale refresh failure %s", generation)
            return
        logger.warning("Refreshing books failed: %s", error)
        self.error_message = error.message or "Error fetching books"
        self.is_loading = False
        self._notify()
