"""A reader's view of one open book: navigation, notes, AI questions and speech."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from phewreader.library.models import Book, ChatMessage, Note
from phewreader.parsers.base import read_text

from .pagination import PagedText

if TYPE_CHECKING:
    from phewreader.library.database import Database
    from phewreader.services.ai import AIResponse, AIService
    from phewreader.services.tts import SpeechService

log = logging.getLogger(__name__)


class ReadingSession:
    def __init__(
        self,
        db: "Database",
        book: Book,
        pages: PagedText,
        ai: Optional["AIService"] = None,
        speech: Optional["SpeechService"] = None,
    ) -> None:
        self._db = db
        self.book = book
        self.pages = pages
        self._ai = ai
        self._speech = speech
        self.current_page = min(max(book.last_page_read, 0), pages.total_pages - 1)

    @classmethod
    def open(
        cls,
        db: "Database",
        book_id: str,
        ai: Optional["AIService"] = None,
        speech: Optional["SpeechService"] = None,
    ) -> Optional["ReadingSession"]:
        """Load a book and its text. Returns None if the book does not exist."""
        book = db.get_book(book_id)
        if book is None:
            return None
        text = read_text(Path(book.file_path)).text if book.file_type == "txt" else ""
        pages = PagedText.for_book(book, text)
        if book.total_pages != pages.total_pages:
            db.update_book_total_pages(book.id, pages.total_pages)
            book.total_pages = pages.total_pages
        return cls(db, book, pages, ai=ai, speech=speech)

    @property
    def total_pages(self) -> int:
        return self.pages.total_pages

    @property
    def is_last_page(self) -> bool:
        return self.current_page >= self.total_pages - 1

    def page_text(self) -> str:
        return self.pages.page(self.current_page)

    def go_to_page(self, page: int) -> bool:
        """Move to ``page``; out-of-range pages are ignored and return False.

        Arriving on the last page without moving backwards completes the book
        once.
        """
        if not self.pages.is_valid(page):
            return False
        forward = page >= self.current_page
        self.current_page = page
        self.book.last_page_read = page
        self._db.update_book_progress(self.book.id, page)

        if forward and self.is_last_page and not self.book.is_completed:
            self._db.mark_book_completed(self.book.id)
            self.book = self._db.get_book(self.book.id) or self.book
            log.info("Book %s completed", self.book.id)
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self.current_page - 1)

    # ── Notes ──────────────────────────────────────────────

    def add_note(self, content: str, chapter: Optional[str] = None) -> Optional[Note]:
        content = content.strip()
        if not content:
            return None
        note = Note(
            book_id=self.book.id, content=content, page=self.current_page, chapter=chapter
        )
        self._db.create_note(note)
        return note

    def notes(self) -> list[Note]:
        return self._db.list_notes_for_book(self.book.id)

    # ── AI ─────────────────────────────────────────────────

    async def ask(self, question: str) -> "AIResponse":
        """Ask about the current page; successful answers are kept in chat history."""
        if self._ai is None:
            raise RuntimeError("No AI service configured")
        response = await self._ai.ask(
            question, self.page_text(), self.book.title, self.current_page
        )
        if response.success:
            self._db.append_chat_message(
                ChatMessage(
                    book_id=self.book.id,
                    question=question,
                    answer=response.content,
                    page=self.current_page,
                )
            )
        return response

    def chat_history(self) -> list[ChatMessage]:
        return self._db.list_chat_for_book(self.book.id)

    def clear_chat(self) -> None:
        self._db.clear_chat_for_book(self.book.id)

    # ── Speech ─────────────────────────────────────────────

    def speak(self) -> None:
        """Read the current page aloud with the voice chosen in settings."""
        if self._speech is None:
            raise RuntimeError("No speech service configured")
        natural = self._db.get_settings().tts_voice == "natural"
        self._speech.speak(self.page_text(), use_natural_voice=natural)

    def stop_speaking(self) -> None:
        if self._speech is not None and self._speech.is_speaking:
            self._speech.stop()
