from __future__ import annotations

from typing import Iterable, List

import pytest

from cli import run_cli
from fakes import FakeClient
from library import LibraryController


def _scripted(answers: Iterable[str]):
    pending: List[str] = list(answers)

    def prompt(_message: str) -> str:
        return pending.pop(0)

    return prompt


def test_delete_with_confirmation(client: FakeClient, capsys: pytest.CaptureFixture[str]) -> None:
    run_cli(LibraryController(client), _scripted(["d 3", "y", "q"]))

    assert ("delete", "7") in client.calls
    assert "Deleted 'Solaris'." in capsys.readouterr().out
    assert client.closed is True


def test_declined_delete_keeps_the_book(client: FakeClient) -> None:
    run_cli(LibraryController(client), _scripted(["d 1", "n", "q"]))

    assert client.count("delete") == 0


def test_edit_retries_after_validation(client: FakeClient, capsys: pytest.CaptureFixture[str]) -> None:
    answers = [
        "e 2",
        # title, author, genre, page count, description, read
        "", "", "", "zero", "", "",
        "y",
        "", "", "", "480", "", "yes",
        "q",
    ]
    run_cli(LibraryController(client), _scripted(answers))

    output = capsys.readouterr().out
    assert "Page Count must be a positive whole number." in output
    assert "Saved 'Emma'." in output
    [(_, sent)] = [call for call in client.calls if call[0] == "update"]
    assert sent.page_count == 480
    assert sent.read is True


def test_empty_library_message(capsys: pytest.CaptureFixture[str]) -> None:
    run_cli(LibraryController(FakeClient([])), _scripted(["q"]))

    assert "No books found." in capsys.readouterr().out


def test_failed_delete_offers_a_retry(client: FakeClient, capsys: pytest.CaptureFixture[str]) -> None:
    client.fail_next["delete"] = "The book service responded with status 500."

    run_cli(LibraryController(client), _scripted(["d 1", "y", "y", "q"]))

    output = capsys.readouterr().out
    assert "Delete failed: The book service responded with status 500." in output
    assert output.index("Delete failed:") < output.index("Deleted 'Dune'.")
    assert client.count("delete") == 2


def test_declining_the_retry_keeps_the_book(
    client: FakeClient, capsys: pytest.CaptureFixture[str]
) -> None:
    client.fail_next["delete"] = "The book service responded with status 500."
    controller = LibraryController(client)

    run_cli(controller, _scripted(["d 1", "y", "n", "q"]))

    output = capsys.readouterr().out
    assert "Kept the book." in output
    assert "Deleted 'Dune'." not in output
    assert client.count("delete") == 1
    assert controller.view_state().confirm_target is None
