from __future__ import annotations

from typing import List

import pytest

from api import BookRecord
from fakes import DeferredDispatcher, FakeClient, make_book


@pytest.fixture
def books() -> List[BookRecord]:
    return [
        make_book("1", title="Dune", author="Frank Herbert", genre="SF", page_count=412),
        make_book("2", title="Emma", author="Jane Austen", genre="Classic", page_count=474),
        make_book("7", title="Solaris", author="Stanislaw Lem", genre="SF", page_count=204),
    ]


@pytest.fixture
def client(books: List[BookRecord]) -> FakeClient:
    return FakeClient(books)


@pytest.fixture
def deferred() -> DeferredDispatcher:
    return DeferredDispatcher()
