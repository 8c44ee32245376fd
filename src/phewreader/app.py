"""Phew Reader - local book library core."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from phewreader.config import AppConfig, load_config
from phewreader.explore.recommendations import RecommendationService
from phewreader.library.database import Database
from phewreader.library.files import BOOK_EXTENSIONS, import_book
from phewreader.library.models import Book
from phewreader.reader.session import ReadingSession
from phewreader.services.ai import AIService
from phewreader.services.subscription import SubscriptionService
from phewreader.services.tts import SpeechEngine, SpeechService

log = logging.getLogger(__name__)


class PhewReaderApp:
    """Wires the store and the services a UI talks to."""

    def __init__(
        self,
        config: AppConfig | None = None,
        speech_engine: Optional[SpeechEngine] = None,
    ) -> None:
        self.config = config or load_config()
        self.db = Database(self.config.db_path)
        self.db.init()
        self.subscriptions = SubscriptionService(self.db)
        self.ai = AIService(self.config, self.subscriptions)
        self.speech = SpeechService(speech_engine, self.subscriptions)
        self.recommendations = RecommendationService(self.db, self.subscriptions)

    def import_file(self, file_path_str: str) -> Optional[Book]:
        file_path = Path(file_path_str).expanduser().resolve()
        if not file_path.is_file():
            log.error("File not found: %s", file_path)
            return None
        if file_path.suffix.lower() not in BOOK_EXTENSIONS:
            log.error("Unsupported format: %s", file_path.suffix)
            return None
        return import_book(self.db, file_path, self.config.books_dir)

    def open_book(self, book_id: str) -> Optional[ReadingSession]:
        return ReadingSession.open(self.db, book_id, ai=self.ai, speech=self.speech)

    async def close(self) -> None:
        await self.ai.close()
        self.db.close()


def _setup_logging(config: AppConfig) -> None:
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("phewreader")
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)


def _format_book(book: Book) -> str:
    author = book.author or "Unknown"
    marks = ("*" if book.is_favorite else " ") + ("✓" if book.is_completed else " ")
    pages = f"{book.last_page_read + 1}/{book.total_pages}" if book.total_pages else "-"
    return f"{marks} {book.title} - {author} [{book.file_type}] {pages}"


def main() -> None:
    config = load_config()
    _setup_logging(config)

    app = PhewReaderApp(config=config)
    try:
        for arg in sys.argv[1:]:
            book = app.import_file(arg)
            if book is None:
                print(f"Could not import {arg}", file=sys.stderr)

        for book in app.db.list_books():
            print(_format_book(book))
    finally:
        app.db.close()


if __name__ == "__main__":
    main()
