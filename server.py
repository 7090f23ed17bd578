from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PayloadError

from inventory import BookStore, get_store as open_store


# -----------------------------------------------------------------------------
# Application setup
# -----------------------------------------------------------------------------

app = FastAPI(title="Book Desk development service", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store() -> BookStore:
    if not hasattr(get_store, "_instance"):
        get_store._instance = open_store()
    return get_store._instance  # type: ignore[attr-defined]


@app.on_event("shutdown")
def _shutdown() -> None:
    store = getattr(get_store, "_instance", None)
    if isinstance(store, BookStore):
        store.close()


# -----------------------------------------------------------------------------
# Pydantic models
# -----------------------------------------------------------------------------


class BookPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = None
    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    genre: str = Field(..., min_length=1)
    pageCount: int = Field(..., ge=1)
    description: str = Field(..., min_length=1)
    read: bool = False


# -----------------------------------------------------------------------------
# Helper utilities
# -----------------------------------------------------------------------------


async def _read_book_part(request: Request) -> BookPayload:
    """Parse the JSON record sent as the multipart ``book`` field."""
    form = await request.form()
    part = form.get("book")
    if part is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Missing 'book' form field",
        )
    # Browsers send the JSON blob as a file part; other clients send a plain field.
    raw = await part.read() if hasattr(part, "read") else part
    try:
        return BookPayload.model_validate_json(raw)
    except PayloadError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False),
        )


def _fields(payload: BookPayload) -> Dict[str, Any]:
    return payload.model_dump(exclude={"id"})


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@app.get("/api/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/books/get-books")
def list_books(store: BookStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return store.list_books()


@app.post("/api/books", status_code=status.HTTP_201_CREATED)
async def create_book(request: Request, store: BookStore = Depends(get_store)) -> Dict[str, Any]:
    payload = await _read_book_part(request)
    book_id = store.add_book(_fields(payload))
    saved = store.get_book(book_id)
    if not saved:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save book")
    return saved


@app.put("/api/books")
async def update_book(request: Request, store: BookStore = Depends(get_store)) -> Dict[str, Any]:
    payload = await _read_book_part(request)
    if payload.id is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Book id is required")
    if not store.replace_book(payload.id, _fields(payload)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    saved = store.get_book(payload.id)
    if not saved:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return saved


@app.delete("/api/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: int, store: BookStore = Depends(get_store)) -> None:
    if not store.delete_book(book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
