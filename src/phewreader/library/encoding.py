"""Conversions between SQLite scalar columns and domain values.

Every read path in the store must invert the matching write path, so all
column encodings live here and nowhere else.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional


def encode_tags(tags: Optional[Iterable[str]]) -> str:
    return json.dumps(list(tags or []))


def decode_tags(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [str(t) for t in json.loads(raw)]


def encode_bool(value: Any) -> int:
    return 1 if value else 0


def decode_bool(raw: Optional[int]) -> bool:
    return bool(raw)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def days_from_now_iso(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def parse_iso(raw: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(raw) if raw else None
