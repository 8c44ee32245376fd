"""Fixed word-count pagination of a book's linear text."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from phewreader.library.models import Book
from phewreader.parsers.placeholder_parser import PLACEHOLDER_TEXT

WORDS_PER_PAGE = 400


def split_words(text: str) -> list[str]:
    return text.split()


def count_pages(text: str, words_per_page: int = WORDS_PER_PAGE) -> int:
    """ceil(words / words_per_page), never less than one page."""
    return max(1, math.ceil(len(split_words(text)) / words_per_page))


def get_page(text: str, index: int, words_per_page: int = WORDS_PER_PAGE) -> str:
    """Return page ``index`` (0-based) of ``text``. Raises IndexError when out of range."""
    return PagedText(text, words_per_page).page(index)


@dataclass
class PagedText:
    """Text split once into words, served as fixed-size pages."""

    text: str
    words_per_page: int = WORDS_PER_PAGE
    words: list[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.words = split_words(self.text)

    @classmethod
    def for_book(cls, book: Book, text: str) -> "PagedText":
        # Only plain text is paged; other formats get a single placeholder page.
        if book.file_type != "txt":
            return cls(PLACEHOLDER_TEXT)
        return cls(text)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(len(self.words) / self.words_per_page))

    def is_valid(self, index: int) -> bool:
        return 0 <= index < self.total_pages

    def page(self, index: int) -> str:
        if not self.is_valid(index):
            raise IndexError(f"Page {index} out of range (0-{self.total_pages - 1})")
        start = index * self.words_per_page
        return " ".join(self.words[start : start + self.words_per_page])
