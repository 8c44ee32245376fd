"""Importing book files into the library directory and reading their metadata."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Optional

from phewreader.parsers.base import read_text

from .database import Database
from .genres import detect_genre
from .models import LEISURE_CATEGORY_ID, Book, FileType, new_id

log = logging.getLogger(__name__)

BOOK_EXTENSIONS = {".pdf", ".epub", ".txt", ".doc", ".docx"}

# Tried in order; each entry is (pattern, group holding the author).
_AUTHOR_PATTERNS = [
    (re.compile(r"^(.+?)\s+-\s+(.+)$"), 1),  # "Author - Title"
    (re.compile(r"^(.+?)\s+by\s+(.+)$", re.IGNORECASE), 2),  # "Title by Author"
]


def file_type_from_name(name: str) -> FileType:
    ext = Path(name).suffix.lower().lstrip(".")
    if ext in ("pdf", "epub", "txt"):
        return ext  # type: ignore[return-value]
    if ext in ("doc", "docx"):
        return "doc"
    return "txt"


def title_from_filename(name: str) -> str:
    return Path(name).stem


def extract_author_from_filename(name: str) -> Optional[str]:
    stem = title_from_filename(name)
    for pattern, group in _AUTHOR_PATTERNS:
        match = pattern.match(stem)
        if match:
            return match.group(group).strip() or None
    return None


def copy_to_library(source: Path, books_dir: Path) -> Path:
    """Copy a file into the app's books directory and return the new path."""
    books_dir.mkdir(parents=True, exist_ok=True)
    target = books_dir / f"{new_id()}_{source.name}"
    shutil.copy2(source, target)
    return target


def import_book(db: Database, source: Path, books_dir: Path) -> Book:
    """Copy ``source`` into the library and register it in the Leisure category."""
    local_path = copy_to_library(source, books_dir)
    file_type = file_type_from_name(source.name)

    content = None
    if file_type == "txt":
        content = read_text(local_path).text

    book = Book(
        title=title_from_filename(source.name),
        author=extract_author_from_filename(source.name),
        file_path=str(local_path),
        category_id=LEISURE_CATEGORY_ID,
        genre_tags=detect_genre(source.name, content),
        file_type=file_type,
        source="local",
    )
    db.create_book(book)
    log.info("Imported %s as %s (%s)", source, book.id, ", ".join(book.genre_tags))
    return book
