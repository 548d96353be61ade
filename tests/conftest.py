from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from congress_digest.config import DatabaseSettings
from congress_digest.db import Database
from congress_digest.storage import RecordStore, SqlSummaryCache


@pytest.fixture()
def temp_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep developer .env files and shell variables out of settings tests
    for var in (
        "DATABASE_URL",
        "OPENAI_API_KEY",
        "CONGRESS_API_KEY",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "CELERY_BROKER_URL",
        "CELERY_RESULT_BACKEND",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def database(tmp_path: Path) -> Generator[Database, None, None]:
    """
    Provide a migrated SQLite ``Database`` in a temp directory.

    Example:
        def test_cache(database):
            cache = SqlSummaryCache(database)
    """
    db = Database(DatabaseSettings(url=f"sqlite:///{tmp_path / 'digest.db'}"))
    db.create_all()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture()
def summary_cache(database: Database) -> SqlSummaryCache:
    return SqlSummaryCache(database)


@pytest.fixture()
def record_store(database: Database) -> RecordStore:
    return RecordStore(database)


# ==================== Fake Fixtures ====================

@pytest.fixture
def document_cache():
    from fakes import InMemoryDocumentCache

    return InMemoryDocumentCache()


@pytest.fixture
def chunk_cache():
    from fakes import InMemoryChunkCache

    return InMemoryChunkCache()
