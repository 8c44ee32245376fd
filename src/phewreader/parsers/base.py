"""Base parser interface for all book formats."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

UNREADABLE_TEXT = (
    "Unable to read file content. This may be a PDF or EPUB file "
    "that requires a native reader."
)


@dataclass
class ExtractedText:
    """Linear text of a book, or a placeholder when it could not be read."""

    text: str
    readable: bool = True


class BaseParser(ABC):
    """Abstract base for format-specific text extraction."""

    SUPPORTED_EXTENSIONS: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, file_path: Path) -> ExtractedText:
        """Return the text of a file."""

    @classmethod
    def can_handle(cls, file_path: Path) -> bool:
        return file_path.suffix.lower() in cls.SUPPORTED_EXTENSIONS


def get_parser(file_path: Path) -> BaseParser:
    """Return the parser for a file; unknown extensions are read as plain text."""
    from phewreader.parsers.placeholder_parser import PlaceholderParser
    from phewreader.parsers.txt_parser import TxtParser

    if PlaceholderParser.can_handle(file_path):
        return PlaceholderParser()
    return TxtParser()


def read_text(file_path: Path) -> ExtractedText:
    """Read a book's text, degrading to a placeholder instead of raising."""
    try:
        return get_parser(file_path).parse(file_path)
    except (OSError, UnicodeError) as e:
        log.warning("Could not read %s: %s", file_path, e)
        return ExtractedText(text=UNREADABLE_TEXT, readable=False)
