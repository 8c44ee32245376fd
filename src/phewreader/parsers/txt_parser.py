"""Plain text parser."""

from __future__ import annotations

from pathlib import Path

from .base import BaseParser, ExtractedText


class TxtParser(BaseParser):
    SUPPORTED_EXTENSIONS = (".txt", ".text")

    def parse(self, file_path: Path) -> ExtractedText:
        return ExtractedText(text=file_path.read_text(encoding="utf-8", errors="replace"))
