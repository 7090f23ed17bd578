from __future__ import annotations

from typing import List

from api import BookRecord
from fakes import DeferredDispatcher, FakeClient, make_book
from state import CollectionStore


def test_refresh_is_loading_only_while_the_request_is_in_flight(
    client: FakeClient, deferred: DeferredDispatcher
) -> None:
    store = CollectionStore(client, deferred)
    assert store.is_loading is False

    store.refresh()
    assert store.is_loading is True
    assert client.count("list") == 0

    deferred.run()
    assert store.is_loading is False
    assert [book.id for book in store.items] == ["1", "2", "7"]
    assert store.loaded is True


def test_refresh_clears_previous_error_before_the_request(
    client: FakeClient, deferred: DeferredDispatcher
) -> None:
    store = CollectionStore(client, deferred)
    client.fail_next["list"] = "Failed to fetch books."
    store.refresh()
    deferred.run()
    assert store.error_message == "Failed to fetch books."

    store.refresh()
    assert store.error_message is None
    assert store.is_loading is True


def test_failed_refresh_keeps_the_previous_items(client: FakeClient, books: List[BookRecord]) -> None:
    store = CollectionStore(client)
    store.refresh()
    assert len(store.items) == 3

    client.fail_next["list"] = "The book service responded with status 500."
    store.refresh()

    assert [book.id for book in store.items] == [book.id for book in books]
    assert store.error_message == "The book service responded with status 500."
    assert store.is_loading is False


def test_items_keep_server_order() -> None:
    client = FakeClient([make_book("z"), make_book("a"), make_book("m")])
    store = CollectionStore(client)

    store.refresh()

    assert [book.id for book in store.items] == ["z", "a", "m"]


def test_only_the_newest_refresh_is_applied(deferred: DeferredDispatcher) -> None:
    client = FakeClient([make_book("1")])
    store = CollectionStore(client, deferred)

    store.refresh()
    client.books.append(make_book("2"))
    store.refresh()

    # The newer request resolves first, then the stale one arrives.
    deferred.run(1)
    assert [book.id for book in store.items] == ["1", "2"]
    assert store.is_loading is False

    deferred.run(0)
    assert [book.id for book in store.items] == ["1", "2"]
    assert store.is_loading is False


def test_stale_completion_does_not_end_loading(deferred: DeferredDispatcher, client: FakeClient) -> None:
    store = CollectionStore(client, deferred)

    store.refresh()
    store.refresh()
    deferred.run(0)

    assert store.is_loading is True
    assert store.items == []

    deferred.run(0)
    assert store.is_loading is False
    assert len(store.items) == 3


def test_listeners_are_notified_and_can_unsubscribe(client: FakeClient) -> None:
    store = CollectionStore(client)
    seen: List[bool] = []
    unsubscribe = store.subscribe(lambda: seen.append(store.is_loading))

    store.refresh()
    assert seen == [True, False]

    unsubscribe()
    store.refresh()
    assert seen == [True, False]
