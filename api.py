from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import requests

from config import settings

logger = logging.getLogger(__name__)

# Wire name -> BookRecord attribute. Field names are shared with the server.
WIRE_FIELDS = {
    "id": "id",
    "title": "title",
    "author": "author",
    "genre": "genre",
    "pageCount": "page_count",
    "description": "description",
    "read": "read",
}


class LibraryError(Exception):
    """Base class for failures surfaced by the library desk."""


class NetworkError(LibraryError):
    """A request to the book service failed or returned a non-success status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class BookRecord:
    """One book as stored by the remote service."""

    id: Any
    title: str = ""
    author: str = ""
    genre: str = ""
    page_count: Optional[int] = None
    description: str = ""
    read: bool = False

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "BookRecord":
        page_count = data.get("pageCount")
        try:
            page_count = int(page_count) if page_count is not None else None
        except (TypeError, ValueError):
            page_count = None
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            author=data.get("author") or "",
            genre=data.get("genre") or "",
            page_count=page_count,
            description=data.get("description") or "",
            read=bool(data.get("read")),
        )

    def to_json(self) -> Dict[str, Any]:
        values = asdict(self)
        return {wire: values[attr] for wire, attr in WIRE_FIELDS.items()}


class BooksClient:
    """Thin client for the book service endpoints.

    ``session`` only needs ``get``, ``delete`` and ``put``; a
    ``requests.Session`` is created when none is given.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Any = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout if timeout is not None else settings.api_timeout

    def list_books(self) -> List[BookRecord]:
        """Fetch the full collection in server order."""
        response = self._send("get", f"{self.base_url}/get-books")
        try:
            data = response.json()
        except ValueError as error:
            raise NetworkError("The book service returned an unreadable response.") from error
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise NetworkError("The book service returned an unexpected response.")
        return [BookRecord.from_json(item) for item in data]

    def delete_book(self, book_id: Any) -> None:
        self._send("delete", f"{self.base_url}/{book_id}")

    def update_book(self, record: BookRecord) -> None:
        """Replace the stored record matching ``record.id`` with every field of ``record``."""
        payload = json.dumps(record.to_json())
        self._send(
            "put",
            self.base_url,
            files={"book": (None, payload, "application/json")},
        )

    def close(self) -> None:
        close = getattr(self.session, "close", None)
        if close:
            close()

    def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("%s %s", method.upper(), url)
        try:
            response = getattr(self.session, method)(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as error:
            logger.warning("Unable to reach the book service: %s", error)
            raise NetworkError(f"Unable to reach the book service: {error}") from error

        if response.status_code >= 400:
            logger.warning("%s %s failed with status %s", method.upper(), url, response.status_code)
            raise NetworkError(
                f"The book service responded with status {response.status_code}.",
                status_code=response.status_code,
            )
        return response
