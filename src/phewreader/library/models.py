"""Data models for the book library."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Literal, Optional

from .encoding import now_iso

FileType = Literal["pdf", "epub", "txt", "doc"]
BookSource = Literal["local", "annas_archive", "affiliate"]
Tier = Literal["free", "basic", "premium", "pro"]

READ_CATEGORY_ID = "4"
LEISURE_CATEGORY_ID = "2"
SINGLETON_ID = "1"

FREE_FEATURES = ["Basic reading", "Notes", "Basic TTS (robotic)", "Local files only"]


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Category:
    name: str
    icon: str
    color: str  # hex, e.g. #10B981
    id: str = ""
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)


@dataclass
class Book:
    title: str
    file_path: str
    id: str = ""
    author: Optional[str] = None
    cover_image: Optional[str] = None
    last_page_read: int = 0  # 0-based page index
    total_pages: int = 0
    category_id: Optional[str] = None
    genre_tags: list[str] = field(default_factory=list)
    file_type: FileType = "txt"
    is_completed: bool = False
    is_favorite: bool = False
    source: BookSource = "local"
    price: Optional[float] = None
    affiliate_url: Optional[str] = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @property
    def progress(self) -> float:
        """Fraction of pages read, 0.0 - 1.0."""
        if self.total_pages <= 0:
            return 0.0
        return min(1.0, self.last_page_read / self.total_pages)


@dataclass
class Note:
    book_id: str
    content: str
    page: int
    id: str = ""
    chapter: Optional[str] = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
    book_title: Optional[str] = None  # only set by joined listings


@dataclass
class ChatMessage:
    book_id: str
    question: str
    answer: str
    id: str = ""
    page: Optional[int] = None
    created_at: str = field(default_factory=now_iso)
    book_title: Optional[str] = None  # only set by joined listings


@dataclass
class UserSubscription:
    tier: Tier
    price: float
    features: list[str] = field(default_factory=list)
    books_per_month: int = 0
    has_ai: bool = False
    has_natural_tts: bool = False
    expires_at: Optional[str] = None
    id: str = SINGLETON_ID
    created_at: str = field(default_factory=now_iso)


@dataclass
class AppSettings:
    tts_mode: Literal["offline", "online"] = "offline"
    tts_voice: Literal["robotic", "natural"] = "robotic"
    font_size: Literal["small", "medium", "large"] = "medium"
    theme: Literal["light", "dark", "sepia"] = "light"
    auto_sync: bool = False
    id: str = SINGLETON_ID
