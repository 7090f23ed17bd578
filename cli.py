from __future__ import annotations

from typing import Callable, Dict, List, Optional

from api import BookRecord, BooksClient
from config import configure_logging, settings
from flows import EDITABLE_FIELDS, FieldKind
from library import LibraryController, ViewState

Prompt = Callable[[str], str]


def describe_book(book: BookRecord, index: int) -> str:
    """Return a printable description for one book."""
    status = "read" if book.read else "unread"
    lines = [
        f"{index}. {book.title}",
        f"   Author: {book.author}",
        f"   Genre: {book.genre}   Pages: {book.page_count}   ({status})",
    ]
    if book.description:
        lines.append(f"   {book.description}")
    return "\n".join(lines)


def render(state: ViewState) -> None:
    if state.banner:
        print(f"!! {state.banner}")
    if state.placeholders:
        print("Loading books…")
        return
    if state.empty_message:
        print(state.empty_message)
        return
    for idx, book in enumerate(state.cards, start=1):
        print(describe_book(book, idx))
    print()


def pick_book(state: ViewState, remainder: str) -> Optional[BookRecord]:
    if not remainder.isdigit():
        print("Use the format '<command> <number>'.")
        return None
    index = int(remainder)
    if not 1 <= index <= len(state.cards):
        print("That selection is out of range. Please try again.")
        return None
    return state.cards[index - 1]


def run_delete(controller: LibraryController, book: BookRecord, prompt: Prompt) -> None:
    controller.on_delete(book)
    answer = prompt(f"Are you sure you want to delete '{book.title}'? [y/N]: ").strip().lower()
    if answer not in {"y", "yes"}:
        controller.on_close_delete()
        print("Kept the book.")
        return
    while True:
        controller.on_confirm()
        state = controller.view_state()
        if state.confirm_target is None:
            print(f"Deleted '{book.title}'.")
            return
        print(f"Delete failed: {state.confirm_error}")
        if prompt("Try again? [Y/n]: ").strip().lower() in {"n", "no"}:
            controller.on_close_delete()
            print("Kept the book.")
            return


def run_edit(controller: LibraryController, book: BookRecord, prompt: Prompt) -> None:
    controller.on_edit(book)
    print("Press Enter to keep the current value, or type 'cancel' to stop editing.")
    while True:
        draft = controller.edit_flow.draft
        changes: Dict[str, str] = {}
        for field in EDITABLE_FIELDS.values():
            current = getattr(draft, field.attr)
            if field.kind is FieldKind.BOOLEAN:
                current = "yes" if current else "no"
            response = prompt(f"{field.label} [{current}]: ").strip()
            if response.lower() == "cancel":
                controller.on_close_edit()
                print("Edit cancelled.")
                return
            if response:
                changes[field.name] = response

        controller.on_save(changes)
        state = controller.view_state()
        if state.edit_draft is None:
            print(f"Saved '{draft.title}'.")
            return
        for message in state.invalid_fields.values():
            print(f"   {message}")
        if state.edit_error:
            print(f"Save failed: {state.edit_error}")
        if prompt("Try again? [Y/n]: ").strip().lower() in {"n", "no"}:
            controller.on_close_edit()
            print("Edit cancelled.")
            return


def run_cli(controller: Optional[LibraryController] = None, prompt: Prompt = input) -> None:
    controller = controller or LibraryController(BooksClient(settings.api_url))
    controller.mount()
    print("\nMy Book Library")
    print("Commands: 'r' refresh, 'd <number>' delete, 'e <number>' edit, 'q' quit.")

    try:
        while True:
            state = controller.view_state()
            render(state)
            response = prompt("> ").strip()
            normalized = response.lower()
            commands: List[str] = normalized.split(maxsplit=1)
            if not commands:
                continue
            command = commands[0]
            remainder = commands[1] if len(commands) > 1 else ""

            if command in {"q", "quit"}:
                return
            if command == "r":
                controller.store.refresh()
            elif command in {"d", "e"}:
                book = pick_book(state, remainder)
                if book is None:
                    continue
                if command == "d":
                    run_delete(controller, book, prompt)
                else:
                    run_edit(controller, book, prompt)
            else:
                print("Please enter a valid option.")
    finally:
        controller.unmount()


def main() -> None:
    configure_logging()
    try:
        run_cli()
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
