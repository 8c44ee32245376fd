"""Tests for recommendation aggregation."""

from __future__ import annotations

from phewreader.explore.recommendations import (
    CATALOG,
    MAX_RESULTS,
    RecommendationService,
    RecommendedBook,
    get_recommendations,
    tally_genres,
    top_genres,
)
from phewreader.library.database import Database
from phewreader.library.models import Book
from phewreader.services.subscription import SubscriptionService


def _books(**genre_counts: int) -> list[Book]:
    books = []
    for genre, count in genre_counts.items():
        for i in range(count):
            books.append(Book(title=f"{genre}-{i}", file_path="/x", genre_tags=[genre]))
    return books


def _rec(rec_id: str, genre: str) -> RecommendedBook:
    return RecommendedBook(
        id=rec_id,
        title=rec_id,
        author="A",
        genre=genre,
        rating=4.0,
        cover_url="",
        price=1.0,
        affiliate_url="https://example.com",
        description="",
        is_available_in_archive=False,
    )


class TestAggregation:
    def test_tally(self):
        books = _books(finance=2) + [
            Book(title="x", file_path="/x", genre_tags=["finance", "fiction"])
        ]
        assert tally_genres(books) == {"finance": 3, "fiction": 1}

    def test_finance_ahead_of_fiction(self):
        result = get_recommendations(_books(finance=5, fiction=1))
        ids = [r.id for r in result]
        assert ids.index("fin-1") < ids.index("fic-1")
        assert ids.index("fin-2") < ids.index("fic-1")
        assert len(result) <= MAX_RESULTS

    def test_backfills_to_six(self):
        result = get_recommendations(_books(fiction=3))
        assert [r.id for r in result] == ["fic-1", "fin-1", "fin-2", "bus-1", "bus-2", "tech-1"]

    def test_empty_library_uses_catalog_order(self):
        result = get_recommendations([])
        assert [r.id for r in result] == ["fin-1", "fin-2", "bus-1", "bus-2", "fic-1", "tech-1"]

    def test_no_duplicates(self):
        result = get_recommendations(_books(finance=3, business=2, technical=1))
        ids = [r.id for r in result]
        assert len(ids) == len(set(ids))

    def test_ties_follow_catalog_order(self):
        counts = {"technical": 2, "fiction": 2, "business": 2, "finance": 2}
        assert top_genres(counts) == ["finance", "business", "fiction"]

    def test_uncatalogued_genres_rank_after_catalogued_ties(self):
        counts = {"mystery": 1, "technical": 1}
        assert top_genres(counts) == ["technical", "mystery"]

    def test_truncated_to_eight(self):
        catalog = {
            "a": tuple(_rec(f"a{i}", "a") for i in range(5)),
            "b": tuple(_rec(f"b{i}", "b") for i in range(5)),
        }
        books = [
            Book(title="1", file_path="/x", genre_tags=["a"]),
            Book(title="2", file_path="/x", genre_tags=["b"]),
        ]
        result = get_recommendations(books, catalog)
        assert len(result) == 8
        assert [r.id for r in result[:5]] == [f"a{i}" for i in range(5)]

    def test_catalog_shape(self):
        assert list(CATALOG) == ["finance", "business", "fiction", "technical"]


class TestRecommendationService:
    def test_recommendations_from_library(self, db: Database, subscriptions: SubscriptionService):
        db.create_book(Book(title="T", file_path="/t", genre_tags=["technical"]))
        service = RecommendationService(db, subscriptions)
        assert service.recommendations()[0].id == "tech-1"

    def test_track_interaction_is_noop(self, db: Database, subscriptions: SubscriptionService):
        service = RecommendationService(db, subscriptions)
        service.track_book_interaction("fin-1", "view")
        assert db.list_books() == []

    def test_free_tier_gets_affiliate(self, db: Database, subscriptions: SubscriptionService):
        service = RecommendationService(db, subscriptions)
        acquisition = service.acquire(CATALOG["finance"][0])
        assert acquisition.mode == "affiliate"
        assert acquisition.url == "https://amazon.com/dp/1612680194"
        assert acquisition.book is None
        assert db.list_books() == []

    def test_paid_tier_adds_archive_book(self, db: Database, subscriptions: SubscriptionService):
        subscriptions.upgrade("basic")
        service = RecommendationService(db, subscriptions)
        acquisition = service.acquire(CATALOG["finance"][1])
        assert acquisition.mode == "archive"

        stored = db.get_book(acquisition.book.id)
        assert stored.title == "The Intelligent Investor"
        assert stored.source == "annas_archive"
        assert stored.price == 0.0
        assert stored.genre_tags == ["finance"]
        assert stored.category_id == "2"

    def test_repeat_acquire_reuses_book(self, db: Database, subscriptions: SubscriptionService):
        subscriptions.upgrade("basic")
        service = RecommendationService(db, subscriptions)
        first = service.acquire(CATALOG["finance"][1])
        second = service.acquire(CATALOG["finance"][1])
        assert second.mode == "archive"
        assert second.book.id == first.book.id
        assert len(db.list_books()) == 1

    def test_paid_tier_not_in_archive(self, db: Database, subscriptions: SubscriptionService):
        subscriptions.upgrade("pro")
        service = RecommendationService(db, subscriptions)
        assert service.acquire(CATALOG["business"][1]).mode == "affiliate"
