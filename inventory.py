from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import settings

# Wire name -> column name.
BOOK_COLUMNS = {
    "title": "title",
    "author": "author",
    "genre": "genre",
    "pageCount": "page_count",
    "description": "description",
    "read": "is_read",
}


class BookStore:
    """SQLite-backed storage for the development book service."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or settings.db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # --------------------------------------------------------------------- #
    # Schema
    # --------------------------------------------------------------------- #
    def _ensure_schema(self) -> None:
        with self._conn:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS books (
                    id INTEGER PRIMARY KEY,
                    title TEXT NOT NULL,
                    author TEXT NOT NULL,
                    genre TEXT NOT NULL,
                    page_count INTEGER NOT NULL,
                    description TEXT NOT NULL,
                    is_read INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                );
                """
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # --------------------------------------------------------------------- #
    # Book management
    # --------------------------------------------------------------------- #
    @staticmethod
    def _to_record(row: sqlite3.Row) -> Dict[str, Any]:
        record: Dict[str, Any] = {"id": row["id"]}
        for wire, column in BOOK_COLUMNS.items():
            record[wire] = row[column]
        record["read"] = bool(record["read"])
        return record

    def list_books(self) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM books ORDER BY id").fetchall()
        return [self._to_record(row) for row in rows]

    def get_book(self, book_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        return self._to_record(row) if row else None

    def add_book(self, record: Dict[str, Any]) -> int:
        columns = list(BOOK_COLUMNS.values())
        values = [record.get(wire) for wire in BOOK_COLUMNS]
        placeholders = ", ".join("?" for _ in columns)
        with self._lock, self._conn:
            cursor = self._conn.execute(
                f"INSERT INTO books ({', '.join(columns)}) VALUES ({placeholders})",
                values,
            )
            return int(cursor.lastrowid)

    def replace_book(self, book_id: int, record: Dict[str, Any]) -> bool:
        """Overwrite every editable column. Returns False when the id is unknown."""
        assignments = ", ".join(f"{column} = ?" for column in BOOK_COLUMNS.values())
        values = [record.get(wire) for wire in BOOK_COLUMNS]
        with self._lock, self._conn:
            cursor = self._conn.execute(
                f"UPDATE books SET {assignments} WHERE id = ?",
                [*values, book_id],
            )
            return cursor.rowcount > 0

    def delete_book(self, book_id: int) -> bool:
        with self._lock, self._conn:
            cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            return cursor.rowcount > 0


# ------------------------------------------------------------------------------
# Convenience factory
# ------------------------------------------------------------------------------
def get_store(db_path: Optional[Path] = None) -> BookStore:
    return BookStore(db_path=db_path)
