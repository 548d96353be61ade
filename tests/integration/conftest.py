from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from congress_digest.api.main import create_app
from congress_digest.config import CongressApiSettings, DatabaseSettings, Settings
from congress_digest.errors import FeedError
from congress_digest.storage import SqlSummaryCache
from congress_digest.summarization import SummarizationOrchestrator
from fakes import FakeFetcher, FixedExtractor, ScriptedProvider, make_document


class StaticFeed:
    """Feed client stand-in serving a fixed list of records."""

    def __init__(self, records=None, fail: bool = False):
        self.records = list(records or [])
        self.fail = fail

    async def fetch_records(self):
        if self.fail:
            raise FeedError("congress.gov feed returned HTTP 500")
        return list(self.records)

    async def aclose(self):
        pass


@pytest.fixture()
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture()
def extractor() -> FixedExtractor:
    return FixedExtractor(make_document(3))


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def app_settings(tmp_path) -> Settings:
    return Settings(
        database=DatabaseSettings(url=f"sqlite:///{tmp_path / 'api.db'}"),
        congress=CongressApiSettings(api_key="CONGRESS-KEY"),
    )


@pytest.fixture()
def orchestrator(database, provider, fetcher, extractor) -> SummarizationOrchestrator:
    cache = SqlSummaryCache(database)
    return SummarizationOrchestrator(
        cache.documents,
        cache.chunks,
        provider,
        fetcher,
        extractor,
        max_words=3,
        chunk_retries=0,
        retry_backoff=0,
    )


@pytest.fixture()
def feed() -> StaticFeed:
    return StaticFeed()


@pytest.fixture()
def test_client(app_settings, database, orchestrator, feed) -> Generator[TestClient, None, None]:
    app = create_app(
        app_settings,
        database=database,
        orchestrator=orchestrator,
        feed_client=feed,
    )
    with TestClient(app) as client:
        yield client
