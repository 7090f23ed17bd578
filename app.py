from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, List, Optional

from api import BookRecord, BooksClient
from config import configure_logging, settings
from dispatch import ThreadDispatcher
from flows import EDITABLE_FIELDS, FieldKind
from library import LibraryController, ViewState

CARD_COLUMNS = 3
CARD_WIDTH = 300
CARD_BG = "#ffffff"
LOADER_BG = "#e5e7eb"
ERROR_FG = "#dc2626"
MUTED_FG = "#9ca3af"


# --------------------------------------------------------------------------- #
# Utility helpers
# --------------------------------------------------------------------------- #
def truncate(value: str, length: int) -> str:
    if len(value) <= length:
        return value
    return value[: length - 1] + "…"


# --------------------------------------------------------------------------- #
# Cards
# --------------------------------------------------------------------------- #
class BookCard(tk.Frame):
    def __init__(
        self,
        master: tk.Misc,
        book: BookRecord,
        on_edit: Callable[[BookRecord], None],
        on_delete: Callable[[BookRecord], None],
    ):
        super().__init__(master, background=CARD_BG, padx=14, pady=12, width=CARD_WIDTH)
        self.book = book

        tk.Label(
            self,
            text=truncate(book.title, 40),
            font=("TkDefaultFont", 13, "bold"),
            background=CARD_BG,
            anchor="w",
        ).grid(row=0, column=0, columnspan=2, sticky="ew")
        tk.Label(self, text=f"by {book.author}", background=CARD_BG, anchor="w").grid(
            row=1, column=0, columnspan=2, sticky="ew"
        )
        tk.Label(
            self,
            text=f"{book.genre} · {book.page_count or '?'} pages",
            background=CARD_BG,
            foreground="#4b5563",
            anchor="w",
        ).grid(row=2, column=0, sticky="w", pady=(4, 0))
        tk.Label(
            self,
            text="Read" if book.read else "Unread",
            background="#dcfce7" if book.read else "#f3f4f6",
            foreground="#15803d" if book.read else "#6b7280",
            padx=6,
        ).grid(row=2, column=1, sticky="e", pady=(4, 0))
        tk.Label(
            self,
            text=truncate(book.description, 140),
            background=CARD_BG,
            wraplength=CARD_WIDTH - 28,
            justify="left",
            anchor="w",
        ).grid(row=3, column=0, columnspan=2, sticky="ew", pady=(8, 8))

        buttons = tk.Frame(self, background=CARD_BG)
        buttons.grid(row=4, column=0, columnspan=2, sticky="e")
        ttk.Button(buttons, text="Edit", command=lambda: on_edit(self.book)).grid(
            row=0, column=0, padx=(0, 6)
        )
        ttk.Button(buttons, text="Delete", command=lambda: on_delete(self.book)).grid(
            row=0, column=1
        )
        self.columnconfigure(0, weight=1)


class BookLoader(tk.Frame):
    """Grey placeholder shown while the first page of books is loading."""

    def __init__(self, master: tk.Misc):
        super().__init__(master, background=CARD_BG, padx=14, pady=12, width=CARD_WIDTH)
        for row, width in enumerate((220, 160, 120, 260, 260)):
            tk.Frame(self, background=LOADER_BG, width=width, height=12).grid(
                row=row, column=0, sticky="w", pady=4
            )


# --------------------------------------------------------------------------- #
# Dialogs
# --------------------------------------------------------------------------- #
class ConfirmDialog(tk.Toplevel):
    def __init__(
        self,
        master: tk.Misc,
        book: BookRecord,
        on_confirm: Callable[[], None],
        on_close: Callable[[], None],
    ):
        super().__init__(master)
        self.book = book
        self.title("Delete book")
        self.resizable(False, False)
        self.transient(master)
        self.protocol("WM_DELETE_WINDOW", on_close)

        ttk.Label(
            self, text=f"Are you sure you want to delete '{truncate(book.title, 50)}'?"
        ).grid(row=0, column=0, columnspan=2, padx=16, pady=(16, 4))
        self.error_label = tk.Label(self, foreground=ERROR_FG, text="")
        self.error_label.grid(row=1, column=0, columnspan=2, padx=16)

        ttk.Button(self, text="Cancel", command=on_close).grid(row=2, column=0, padx=4, pady=(8, 16))
        self.delete_button = ttk.Button(self, text="Delete", command=on_confirm)
        self.delete_button.grid(row=2, column=1, padx=4, pady=(8, 16))
        self.grab_set()

    def update_state(self, error: Optional[str], busy: bool) -> None:
        self.error_label.configure(text=error or "")
        self.delete_button.configure(state="disabled" if busy else "normal")


class EditDialog(tk.Toplevel):
    def __init__(
        self,
        master: tk.Misc,
        draft: BookRecord,
        on_save: Callable[[Dict[str, object]], None],
        on_close: Callable[[], None],
    ):
        super().__init__(master)
        self.title("Edit Book")
        self.resizable(False, False)
        self.transient(master)
        self.protocol("WM_DELETE_WINDOW", on_close)
        self._on_save = on_save

        self.vars: Dict[str, tk.Variable] = {}
        self.labels: Dict[str, tk.Label] = {}
        self.description_text: Optional[tk.Text] = None

        row = 0
        for field in EDITABLE_FIELDS.values():
            value = getattr(draft, field.attr)
            if field.kind is FieldKind.BOOLEAN:
                var: tk.Variable = tk.BooleanVar(value=bool(value))
                ttk.Checkbutton(self, text=field.label, variable=var).grid(
                    row=row, column=1, sticky="w", padx=(0, 16), pady=4
                )
                self.vars[field.name] = var
                row += 1
                continue

            label = tk.Label(self, text=f"{field.label}:")
            label.grid(row=row, column=0, sticky="nw", padx=(16, 8), pady=4)
            self.labels[field.name] = label
            if field.name == "description":
                self.description_text = tk.Text(self, width=40, height=4, wrap="word")
                self.description_text.insert("1.0", value or "")
                self.description_text.grid(row=row, column=1, sticky="ew", padx=(0, 16), pady=4)
            else:
                var = tk.StringVar(value="" if value is None else str(value))
                ttk.Entry(self, textvariable=var, width=40).grid(
                    row=row, column=1, sticky="ew", padx=(0, 16), pady=4
                )
                self.vars[field.name] = var
            row += 1

        self.error_label = tk.Label(self, foreground=ERROR_FG, text="", justify="left")
        self.error_label.grid(row=row, column=0, columnspan=2, sticky="w", padx=16)

        button_frame = ttk.Frame(self)
        button_frame.grid(row=row + 1, column=0, columnspan=2, pady=(8, 16))
        self.save_button = ttk.Button(button_frame, text="Save Changes", command=self._save)
        self.save_button.grid(row=0, column=0, padx=4)
        ttk.Button(button_frame, text="Cancel", command=on_close).grid(row=0, column=1, padx=4)
        self.grab_set()

    def values(self) -> Dict[str, object]:
        values: Dict[str, object] = {name: var.get() for name, var in self.vars.items()}
        if self.description_text is not None:
            values["description"] = self.description_text.get("1.0", "end-1c")
        return values

    def _save(self) -> None:
        self._on_save(self.values())

    def update_state(self, invalid: Dict[str, str], error: Optional[str], busy: bool) -> None:
        for name, label in self.labels.items():
            label.configure(foreground=ERROR_FG if name in invalid else "")
        messages: List[str] = list(invalid.values())
        if error:
            messages.append(error)
        self.error_label.configure(text="\n".join(messages))
        self.save_button.configure(state="disabled" if busy else "normal")


# --------------------------------------------------------------------------- #
# Main application
# --------------------------------------------------------------------------- #
class LibraryWindow(tk.Tk):
    def __init__(self, client: Optional[BooksClient] = None):
        super().__init__()
        self.title("My Book Library")
        self.geometry("1040x760")
        self.minsize(720, 480)

        self.controller = LibraryController(
            client, dispatcher=ThreadDispatcher(lambda callback: self.after(0, callback))
        )
        self.confirm_dialog: Optional[ConfirmDialog] = None
        self.edit_dialog: Optional[EditDialog] = None
        self._edit_target: Optional[BookRecord] = None
        self._grid_key: Optional[tuple] = None

        self._build_ui()
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self.controller.mount(self.render)

    def _build_ui(self) -> None:
        ttk.Label(self, text="My Book Library", font=("TkDefaultFont", 20, "bold")).pack(
            pady=(16, 8)
        )
        self.banner = tk.Label(self, foreground=ERROR_FG, font=("TkDefaultFont", 11, "bold"))

        container = ttk.Frame(self)
        container.pack(fill="both", expand=True, padx=16, pady=(0, 16))
        container.columnconfigure(0, weight=1)
        container.rowconfigure(0, weight=1)

        self.canvas = tk.Canvas(container, highlightthickness=0, background="#f3f4f6")
        self.canvas.grid(row=0, column=0, sticky="nsew")
        scroll = ttk.Scrollbar(container, orient="vertical", command=self.canvas.yview)
        scroll.grid(row=0, column=1, sticky="ns")
        self.canvas.configure(yscrollcommand=scroll.set)

        self.grid_frame = tk.Frame(self.canvas, background="#f3f4f6")
        self.canvas.create_window((0, 0), window=self.grid_frame, anchor="nw")
        self.grid_frame.bind(
            "<Configure>",
            lambda _event: self.canvas.configure(scrollregion=self.canvas.bbox("all")),
        )

    # ------------------------------------------------------------------
    def render(self) -> None:
        state = self.controller.view_state()
        self._render_banner(state)
        self._render_grid(state)
        self._render_confirm_dialog(state)
        self._render_edit_dialog(state)

    def _render_banner(self, state: ViewState) -> None:
        if state.banner:
            self.banner.configure(text=state.banner)
            if not self.banner.winfo_ismapped():
                self.banner.pack(before=self.canvas.master, pady=(0, 8))
        else:
            self.banner.pack_forget()

    def _render_grid(self, state: ViewState) -> None:
        # Dialog-only changes leave the cards untouched.
        key = (state.placeholders, state.empty_message, state.cards)
        if key == self._grid_key:
            return
        self._grid_key = key

        for child in self.grid_frame.winfo_children():
            child.destroy()

        if state.placeholders:
            widgets: List[tk.Widget] = [BookLoader(self.grid_frame) for _ in range(state.placeholders)]
        elif state.empty_message:
            tk.Label(
                self.grid_frame,
                text=state.empty_message,
                foreground=MUTED_FG,
                background="#f3f4f6",
                font=("TkDefaultFont", 13),
            ).grid(row=0, column=0, pady=40, padx=40)
            return
        else:
            widgets = [
                BookCard(self.grid_frame, book, self.controller.on_edit, self.controller.on_delete)
                for book in state.cards
            ]

        for index, widget in enumerate(widgets):
            widget.grid(
                row=index // CARD_COLUMNS,
                column=index % CARD_COLUMNS,
                padx=12,
                pady=12,
                sticky="nsew",
            )

    def _render_confirm_dialog(self, state: ViewState) -> None:
        target = state.confirm_target
        if self.confirm_dialog is not None and (target is None or self.confirm_dialog.book is not target):
            self.confirm_dialog.destroy()
            self.confirm_dialog = None
        if target is not None and self.confirm_dialog is None:
            self.confirm_dialog = ConfirmDialog(
                self, target, self.controller.on_confirm, self.controller.on_close_delete
            )
        if self.confirm_dialog is not None:
            self.confirm_dialog.update_state(state.confirm_error, state.busy)

    def _render_edit_dialog(self, state: ViewState) -> None:
        target = state.edit_target
        if self.edit_dialog is not None and (target is None or self._edit_target is not target):
            self.edit_dialog.destroy()
            self.edit_dialog = None
            self._edit_target = None
        if target is not None and state.edit_draft is not None and self.edit_dialog is None:
            self.edit_dialog = EditDialog(
                self, state.edit_draft, self.controller.on_save, self.controller.on_close_edit
            )
            self._edit_target = target
        if self.edit_dialog is not None:
            self.edit_dialog.update_state(state.invalid_fields, state.edit_error, state.busy)

    def on_close(self) -> None:
        try:
            self.controller.unmount()
        finally:
            self.destroy()


def main() -> None:
    configure_logging()
    window = LibraryWindow(BooksClient(settings.api_url))
    window.mainloop()


if __name__ == "__main__":
    main()
