"""Stand-in for formats whose text is not extracted (pdf, epub, doc)."""

from __future__ import annotations

from pathlib import Path

from .base import BaseParser, ExtractedText

PLACEHOLDER_TEXT = (
    "This file type requires the full native version of the app for optimal "
    "reading. You can still add notes and use AI features with the visible content."
)


class PlaceholderParser(BaseParser):
    SUPPORTED_EXTENSIONS = (".pdf", ".epub", ".doc", ".docx")

    def parse(self, file_path: Path) -> ExtractedText:
        return ExtractedText(text=PLACEHOLDER_TEXT, readable=False)
