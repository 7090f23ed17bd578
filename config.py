from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

APP_DIR = Path.home() / ".book_desk"


@dataclass
class Settings:
    # Remote book service
    api_url: str = os.getenv("BOOKS_API_URL", "http://localhost:8080/api/books")
    api_timeout: float = float(os.getenv("BOOKS_API_TIMEOUT", "15"))

    # Presentation
    placeholder_count: int = int(os.getenv("BOOKS_PLACEHOLDERS", "4"))

    # Development service storage
    db_path: Path = field(
        default_factory=lambda: Path(os.getenv("BOOKS_DB_PATH", str(APP_DIR / "books.db")))
    )

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
