"""SQLite store for categories, books, notes, chat history, subscription and settings."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from phewreader.errors import MissingRecordError, StoreNotInitializedError

from .encoding import decode_bool, decode_tags, encode_bool, encode_tags, now_iso
from .models import (
    FREE_FEATURES,
    READ_CATEGORY_ID,
    SINGLETON_ID,
    AppSettings,
    Book,
    Category,
    ChatMessage,
    Note,
    UserSubscription,
    new_id,
)

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    icon TEXT NOT NULL,
    color TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS books (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT,
    file_path TEXT NOT NULL,
    cover_image TEXT,
    last_page_read INTEGER DEFAULT 0,
    total_pages INTEGER DEFAULT 0,
    category_id TEXT REFERENCES categories(id) ON DELETE SET NULL,
    genre_tags TEXT,
    file_type TEXT NOT NULL,
    is_completed INTEGER DEFAULT 0,
    is_favorite INTEGER DEFAULT 0,
    source TEXT DEFAULT 'local',
    price REAL,
    affiliate_url TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    page INTEGER NOT NULL,
    chapter TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS chat_history (
    id TEXT PRIMARY KEY,
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    page INTEGER,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS user_subscription (
    id TEXT PRIMARY KEY,
    tier TEXT NOT NULL,
    price REAL NOT NULL,
    features TEXT NOT NULL,
    books_per_month INTEGER NOT NULL,
    has_ai INTEGER DEFAULT 0,
    has_natural_tts INTEGER DEFAULT 0,
    expires_at TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS settings (
    id TEXT PRIMARY KEY,
    tts_mode TEXT DEFAULT 'offline',
    tts_voice TEXT DEFAULT 'robotic',
    font_size TEXT DEFAULT 'medium',
    theme TEXT DEFAULT 'light',
    auto_sync INTEGER DEFAULT 0
);
"""

# (id, name, icon, color)
DEFAULT_CATEGORIES = [
    ("1", "Finance", "DollarSign", "#10B981"),
    ("2", "Leisure", "Coffee", "#F59E0B"),
    ("3", "Discipline", "Target", "#EF4444"),
    (READ_CATEGORY_ID, "Read", "CheckCircle", "#8B5CF6"),
    ("5", "Favorites", "Heart", "#EC4899"),
]

DEFAULT_CATEGORY_IDS = frozenset(cid for cid, _, _, _ in DEFAULT_CATEGORIES)


class Database:
    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_initialized(self) -> bool:
        return self._conn is not None

    def init(self) -> None:
        """Open the database, create missing tables and seed default rows."""
        if self._conn is not None:
            return
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        self._conn = conn
        try:
            self._init_schema()
            self._seed_defaults()
        except sqlite3.Error:
            self._conn = None
            conn.close()
            raise
        log.info("Database ready at %s", self._db_path)

    def _init_schema(self) -> None:
        self._db.executescript(_SCHEMA)
        self._db.commit()

    def _seed_defaults(self) -> None:
        now = now_iso()
        self._db.executemany(
            """INSERT OR IGNORE INTO categories
               (id, name, icon, color, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            [(cid, name, icon, color, now, now) for cid, name, icon, color in DEFAULT_CATEGORIES],
        )
        self._db.execute(
            """INSERT OR IGNORE INTO user_subscription
               (id, tier, price, features, books_per_month, has_ai, has_natural_tts, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (SINGLETON_ID, "free", 0, encode_tags(FREE_FEATURES), 0, 0, 0, now),
        )
        self._db.execute(
            """INSERT OR IGNORE INTO settings
               (id, tts_mode, tts_voice, font_size, theme, auto_sync)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (SINGLETON_ID, "offline", "robotic", "medium", "light", 0),
        )
        self._db.commit()

    @property
    def _db(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreNotInitializedError()
        return self._conn

    def _write(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        cur = self._db.execute(sql, params)
        self._db.commit()
        return cur.rowcount

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ── Categories ─────────────────────────────────────────

    def list_categories(self) -> list[Category]:
        rows = self._db.execute("SELECT * FROM categories ORDER BY name").fetchall()
        return [self._row_to_category(r) for r in rows]

    def get_category(self, category_id: str) -> Optional[Category]:
        row = self._db.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return self._row_to_category(row) if row else None

    def create_category(self, category: Category) -> str:
        category.id = new_id()
        self._write(
            """INSERT INTO categories (id, name, icon, color, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                category.id,
                category.name,
                category.icon,
                category.color,
                category.created_at,
                category.updated_at,
            ),
        )
        return category.id

    def delete_category(self, category_id: str) -> None:
        """Delete a user category. The seeded defaults cannot be deleted."""
        if category_id in DEFAULT_CATEGORY_IDS:
            raise ValueError(f"Cannot delete default category: {category_id!r}")
        self._write("DELETE FROM categories WHERE id = ?", (category_id,))

    @staticmethod
    def _row_to_category(row: sqlite3.Row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            icon=row["icon"],
            color=row["color"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # ── Books ──────────────────────────────────────────────

    def list_books(self) -> list[Book]:
        rows = self._db.execute("SELECT * FROM books ORDER BY title").fetchall()
        return [self._row_to_book(r) for r in rows]

    def list_books_by_category(self, category_id: str) -> list[Book]:
        rows = self._db.execute(
            "SELECT * FROM books WHERE category_id = ? ORDER BY title", (category_id,)
        ).fetchall()
        return [self._row_to_book(r) for r in rows]

    def list_favorite_books(self) -> list[Book]:
        rows = self._db.execute(
            "SELECT * FROM books WHERE is_favorite = 1 ORDER BY title"
        ).fetchall()
        return [self._row_to_book(r) for r in rows]

    def search_books(self, query: str) -> list[Book]:
        q = f"%{query}%"
        rows = self._db.execute(
            "SELECT * FROM books WHERE title LIKE ? OR author LIKE ? ORDER BY title",
            (q, q),
        ).fetchall()
        return [self._row_to_book(r) for r in rows]

    def get_book(self, book_id: str) -> Optional[Book]:
        row = self._db.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        return self._row_to_book(row) if row else None

    def find_book(self, title: str, author: Optional[str], source: str) -> Optional[Book]:
        row = self._db.execute(
            "SELECT * FROM books WHERE title = ? AND author IS ? AND source = ? LIMIT 1",
            (title, author, source),
        ).fetchone()
        return self._row_to_book(row) if row else None

    def create_book(self, book: Book) -> str:
        book.id = new_id()
        self._write(
            """INSERT INTO books
               (id, title, author, file_path, cover_image, last_page_read, total_pages,
                category_id, genre_tags, file_type, is_completed, is_favorite, source,
                price, affiliate_url, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                book.id,
                book.title,
                book.author,
                book.file_path,
                book.cover_image,
                book.last_page_read,
                book.total_pages,
                book.category_id,
                encode_tags(book.genre_tags),
                book.file_type,
                encode_bool(book.is_completed),
                encode_bool(book.is_favorite),
                book.source,
                book.price,
                book.affiliate_url,
                book.created_at,
                book.updated_at,
            ),
        )
        return book.id

    def delete_book(self, book_id: str) -> None:
        self._write("DELETE FROM books WHERE id = ?", (book_id,))

    def update_book_progress(self, book_id: str, page: int) -> None:
        self._write(
            "UPDATE books SET last_page_read = ?, updated_at = ? WHERE id = ?",
            (page, now_iso(), book_id),
        )

    def update_book_total_pages(self, book_id: str, total_pages: int) -> None:
        self._write(
            "UPDATE books SET total_pages = ?, updated_at = ? WHERE id = ?",
            (total_pages, now_iso(), book_id),
        )

    def update_book_category(self, book_id: str, category_id: Optional[str]) -> None:
        """Move a book to another category.

        Raises sqlite3.IntegrityError if ``category_id`` names no category.
        """
        self._write(
            "UPDATE books SET category_id = ?, updated_at = ? WHERE id = ?",
            (category_id, now_iso(), book_id),
        )

    def toggle_book_favorite(self, book_id: str) -> Optional[bool]:
        """Flip is_favorite and return the new value, or None if the book is gone.

        Read and write are separate statements; concurrent togglers can lose
        an update.
        """
        book = self.get_book(book_id)
        if book is None:
            return None
        favorite = not book.is_favorite
        self._write(
            "UPDATE books SET is_favorite = ?, updated_at = ? WHERE id = ?",
            (encode_bool(favorite), now_iso(), book_id),
        )
        return favorite

    def mark_book_completed(self, book_id: str) -> None:
        self._write(
            "UPDATE books SET is_completed = 1, category_id = ?, updated_at = ? WHERE id = ?",
            (READ_CATEGORY_ID, now_iso(), book_id),
        )

    @staticmethod
    def _row_to_book(row: sqlite3.Row) -> Book:
        return Book(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            file_path=row["file_path"],
            cover_image=row["cover_image"],
            last_page_read=row["last_page_read"] or 0,
            total_pages=row["total_pages"] or 0,
            category_id=row["category_id"],
            genre_tags=decode_tags(row["genre_tags"]),
            file_type=row["file_type"],
            is_completed=decode_bool(row["is_completed"]),
            is_favorite=decode_bool(row["is_favorite"]),
            source=row["source"],
            price=row["price"],
            affiliate_url=row["affiliate_url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # ── Notes ──────────────────────────────────────────────

    def list_notes_for_book(self, book_id: str) -> list[Note]:
        rows = self._db.execute(
            "SELECT * FROM notes WHERE book_id = ? ORDER BY page, created_at, rowid",
            (book_id,),
        ).fetchall()
        return [self._row_to_note(r) for r in rows]

    def list_all_notes(self) -> list[Note]:
        rows = self._db.execute(
            """SELECT n.*, b.title AS book_title
               FROM notes n JOIN books b ON n.book_id = b.id
               ORDER BY n.created_at DESC, n.rowid DESC"""
        ).fetchall()
        return [self._row_to_note(r) for r in rows]

    def create_note(self, note: Note) -> str:
        note.id = new_id()
        self._write(
            """INSERT INTO notes (id, book_id, content, page, chapter, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                note.id,
                note.book_id,
                note.content,
                note.page,
                note.chapter,
                note.created_at,
                note.updated_at,
            ),
        )
        return note.id

    def delete_note(self, note_id: str) -> None:
        self._write("DELETE FROM notes WHERE id = ?", (note_id,))

    @staticmethod
    def _row_to_note(row: sqlite3.Row) -> Note:
        return Note(
            id=row["id"],
            book_id=row["book_id"],
            content=row["content"],
            page=row["page"],
            chapter=row["chapter"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            book_title=row["book_title"] if "book_title" in row.keys() else None,
        )

    # ── Chat History ───────────────────────────────────────

    def list_chat_for_book(self, book_id: str) -> list[ChatMessage]:
        rows = self._db.execute(
            "SELECT * FROM chat_history WHERE book_id = ? ORDER BY created_at, rowid",
            (book_id,),
        ).fetchall()
        return [self._row_to_chat(r) for r in rows]

    def list_all_chat(self) -> list[ChatMessage]:
        rows = self._db.execute(
            """SELECT c.*, b.title AS book_title
               FROM chat_history c JOIN books b ON c.book_id = b.id
               ORDER BY c.created_at DESC, c.rowid DESC"""
        ).fetchall()
        return [self._row_to_chat(r) for r in rows]

    def append_chat_message(self, message: ChatMessage) -> str:
        message.id = new_id()
        self._write(
            """INSERT INTO chat_history (id, book_id, question, answer, page, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                message.id,
                message.book_id,
                message.question,
                message.answer,
                message.page,
                message.created_at,
            ),
        )
        return message.id

    def clear_chat_for_book(self, book_id: str) -> None:
        self._write("DELETE FROM chat_history WHERE book_id = ?", (book_id,))

    @staticmethod
    def _row_to_chat(row: sqlite3.Row) -> ChatMessage:
        return ChatMessage(
            id=row["id"],
            book_id=row["book_id"],
            question=row["question"],
            answer=row["answer"],
            page=row["page"],
            created_at=row["created_at"],
            book_title=row["book_title"] if "book_title" in row.keys() else None,
        )

    # ── Subscription ───────────────────────────────────────

    def get_subscription(self) -> UserSubscription:
        row = self._db.execute(
            "SELECT * FROM user_subscription WHERE id = ?", (SINGLETON_ID,)
        ).fetchone()
        if not row:
            raise MissingRecordError("user_subscription")
        return UserSubscription(
            id=row["id"],
            tier=row["tier"],
            price=row["price"],
            features=decode_tags(row["features"]),
            books_per_month=row["books_per_month"],
            has_ai=decode_bool(row["has_ai"]),
            has_natural_tts=decode_bool(row["has_natural_tts"]),
            expires_at=row["expires_at"],
            created_at=row["created_at"],
        )

    def update_subscription(self, **changes: Any) -> UserSubscription:
        """Merge ``changes`` over the stored subscription and write the whole record back."""
        updated = replace(self.get_subscription(), **changes)
        self._write(
            """UPDATE user_subscription
               SET tier = ?, price = ?, features = ?, books_per_month = ?,
                   has_ai = ?, has_natural_tts = ?, expires_at = ?
               WHERE id = ?""",
            (
                updated.tier,
                updated.price,
                encode_tags(updated.features),
                updated.books_per_month,
                encode_bool(updated.has_ai),
                encode_bool(updated.has_natural_tts),
                updated.expires_at,
                SINGLETON_ID,
            ),
        )
        return updated

    # ── Settings ───────────────────────────────────────────

    def get_settings(self) -> AppSettings:
        row = self._db.execute(
            "SELECT * FROM settings WHERE id = ?", (SINGLETON_ID,)
        ).fetchone()
        if not row:
            raise MissingRecordError("settings")
        return AppSettings(
            id=row["id"],
            tts_mode=row["tts_mode"],
            tts_voice=row["tts_voice"],
            font_size=row["font_size"],
            theme=row["theme"],
            auto_sync=decode_bool(row["auto_sync"]),
        )

    def update_settings(self, **changes: Any) -> AppSettings:
        updated = replace(self.get_settings(), **changes)
        self._write(
            """UPDATE settings
               SET tts_mode = ?, tts_voice = ?, font_size = ?, theme = ?, auto_sync = ?
               WHERE id = ?""",
            (
                updated.tts_mode,
                updated.tts_voice,
                updated.font_size,
                updated.theme,
                encode_bool(updated.auto_sync),
                SINGLETON_ID,
            ),
        )
        return updated
