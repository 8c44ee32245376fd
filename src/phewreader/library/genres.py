"""Keyword-based genre inference for imported books."""

from __future__ import annotations

from typing import Optional

FALLBACK_GENRE = "general"

# Declaration order is the output order.
GENRE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "finance": ("finance", "money", "investment", "investor", "wealth", "trading", "economics", "business"),
    "business": ("business", "entrepreneur", "management", "leadership", "startup", "strategy"),
    "technical": ("programming", "code", "development", "software", "computer", "tech", "algorithm"),
    "fiction": ("novel", "story", "fiction", "tale", "adventure", "romance"),
    "mystery": ("mystery", "detective", "crime", "murder", "thriller"),
    "scifi": ("science fiction", "sci-fi", "space", "future", "robot", "alien"),
    "fantasy": ("fantasy", "magic", "wizard", "dragon", "kingdom"),
    "biography": ("biography", "memoir", "life of", "autobiography"),
    "history": ("history", "historical", "war", "ancient", "civilization"),
    "selfhelp": ("self help", "self-help", "improve", "success", "motivation", "productivity"),
    "health": ("health", "fitness", "diet", "nutrition", "wellness", "medical"),
    "philosophy": ("philosophy", "wisdom", "ethics", "meaning", "existence"),
}


def detect_genre(title: str, content: Optional[str] = None) -> list[str]:
    """Return every genre with a keyword in the title or content, else ``["general"]``."""
    title_lower = title.lower()
    content_lower = (content or "").lower()
    genres = [
        genre
        for genre, keywords in GENRE_KEYWORDS.items()
        if any(k in title_lower or k in content_lower for k in keywords)
    ]
    return genres or [FALLBACK_GENRE]
