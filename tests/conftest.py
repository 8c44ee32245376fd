"""Shared fixtures for tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from phewreader.config import AppConfig
from phewreader.library.database import Database
from phewreader.services.subscription import SubscriptionService


@pytest.fixture
def db(tmp_path: Path) -> Database:
    database = Database(tmp_path / "test.db")
    database.init()
    yield database
    database.close()


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )


@pytest.fixture
def subscriptions(db: Database) -> SubscriptionService:
    return SubscriptionService(db)
