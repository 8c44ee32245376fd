"""Recommendations ranked by the genres the user already reads."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Literal, Mapping, Optional, Sequence

from phewreader.library.models import LEISURE_CATEGORY_ID, Book
from phewreader.services.subscription import can_get_free

if TYPE_CHECKING:
    from phewreader.library.database import Database
    from phewreader.services.subscription import SubscriptionService

log = logging.getLogger(__name__)

TOP_GENRES = 3
MIN_RESULTS = 6
MAX_RESULTS = 8

_COVER = (
    "https://images.pexels.com/photos/159711/books-bookstore-book-reading-159711.jpeg"
    "?auto=compress&cs=tinysrgb&w=300&h=400&fit=crop"
)


@dataclass(frozen=True)
class RecommendedBook:
    id: str
    title: str
    author: str
    genre: str
    rating: float
    cover_url: str
    price: float
    affiliate_url: str
    description: str
    is_available_in_archive: bool


CATALOG: dict[str, tuple[RecommendedBook, ...]] = {
    "finance": (
        RecommendedBook(
            id="fin-1",
            title="Rich Dad Poor Dad",
            author="Robert Kiyosaki",
            genre="Finance",
            rating=4.7,
            cover_url=_COVER,
            price=12.99,
            affiliate_url="https://amazon.com/dp/1612680194",
            description="A guide to financial literacy and building wealth through smart investments.",
            is_available_in_archive=True,
        ),
        RecommendedBook(
            id="fin-2",
            title="The Intelligent Investor",
            author="Benjamin Graham",
            genre="Finance",
            rating=4.8,
            cover_url=_COVER,
            price=15.99,
            affiliate_url="https://amazon.com/dp/0060555661",
            description="The definitive book on value investing and market analysis.",
            is_available_in_archive=True,
        ),
    ),
    "business": (
        RecommendedBook(
            id="bus-1",
            title="Atomic Habits",
            author="James Clear",
            genre="Business",
            rating=4.9,
            cover_url=_COVER,
            price=13.99,
            affiliate_url="https://amazon.com/dp/0735211299",
            description="An easy way to build good habits and break bad ones.",
            is_available_in_archive=True,
        ),
        RecommendedBook(
            id="bus-2",
            title="The Lean Startup",
            author="Eric Ries",
            genre="Business",
            rating=4.5,
            cover_url=_COVER,
            price=14.99,
            affiliate_url="https://amazon.com/dp/0307887898",
            description="How constant innovation creates radically successful businesses.",
            is_available_in_archive=False,
        ),
    ),
    "fiction": (
        RecommendedBook(
            id="fic-1",
            title="The Seven Husbands of Evelyn Hugo",
            author="Taylor Jenkins Reid",
            genre="Fiction",
            rating=4.8,
            cover_url=_COVER,
            price=11.99,
            affiliate_url="https://amazon.com/dp/1501161938",
            description="A captivating novel about a reclusive Hollywood icon.",
            is_available_in_archive=True,
        ),
    ),
    "technical": (
        RecommendedBook(
            id="tech-1",
            title="Clean Code",
            author="Robert C. Martin",
            genre="Technical",
            rating=4.7,
            cover_url=_COVER,
            price=24.99,
            affiliate_url="https://amazon.com/dp/0132350884",
            description="A handbook of agile software craftsmanship.",
            is_available_in_archive=True,
        ),
    ),
}


def tally_genres(books: Iterable[Book]) -> Counter[str]:
    return Counter(genre for book in books for genre in book.genre_tags)


def top_genres(
    counts: Mapping[str, int],
    catalog: Mapping[str, Sequence[RecommendedBook]] = CATALOG,
    limit: int = TOP_GENRES,
) -> list[str]:
    """Most frequent genres; ties go to catalog order, then first-seen order."""
    order = {genre: i for i, genre in enumerate(catalog)}
    ranked = sorted(counts, key=lambda g: (-counts[g], order.get(g, len(order))))
    return ranked[:limit]


def get_recommendations(
    books: Iterable[Book],
    catalog: Mapping[str, Sequence[RecommendedBook]] = CATALOG,
) -> list[RecommendedBook]:
    picked: list[RecommendedBook] = []
    seen: set[str] = set()

    def add(rec: RecommendedBook) -> None:
        if rec.id not in seen:
            seen.add(rec.id)
            picked.append(rec)

    for genre in top_genres(tally_genres(books), catalog):
        for rec in catalog.get(genre, ()):
            add(rec)

    if len(picked) < MIN_RESULTS:
        for entries in catalog.values():
            for rec in entries:
                if len(picked) >= MIN_RESULTS:
                    break
                add(rec)

    return picked[:MAX_RESULTS]


@dataclass
class Acquisition:
    """How a recommended book is obtained: added free from the archive, or bought."""

    mode: Literal["archive", "affiliate"]
    recommended: RecommendedBook
    book: Optional[Book] = None  # library entry created in archive mode

    @property
    def url(self) -> str:
        return self.recommended.affiliate_url


class RecommendationService:
    def __init__(self, db: "Database", subscriptions: "SubscriptionService") -> None:
        self._db = db
        self._subscriptions = subscriptions

    def recommendations(self) -> list[RecommendedBook]:
        return get_recommendations(self._db.list_books())

    def track_book_interaction(self, book_id: str, action: str) -> None:
        # Hook for ranking feedback; nothing is persisted yet.
        log.info("Tracked %s for book %s", action, book_id)

    def acquire(self, recommended: RecommendedBook) -> Acquisition:
        if not can_get_free(self._subscriptions.current(), recommended):
            self.track_book_interaction(recommended.id, "view")
            return Acquisition(mode="affiliate", recommended=recommended)

        existing = self._db.find_book(recommended.title, recommended.author, "annas_archive")
        if existing is not None:
            log.info("%s is already in the library as %s", recommended.title, existing.id)
            return Acquisition(mode="archive", recommended=recommended, book=existing)

        book = Book(
            title=recommended.title,
            author=recommended.author,
            file_path="",
            cover_image=recommended.cover_url,
            category_id=LEISURE_CATEGORY_ID,
            genre_tags=[recommended.genre.lower()],
            file_type="epub",
            source="annas_archive",
            price=0.0,
            affiliate_url=recommended.affiliate_url,
        )
        self._db.create_book(book)
        self.track_book_interaction(recommended.id, "purchase")
        return Acquisition(mode="archive", recommended=recommended, book=book)
