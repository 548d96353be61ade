"""
Validation tests for the fake implementations.

These tests ensure the fakes honour the cache and provider contracts the
orchestrator relies on.
"""

import pytest

from congress_digest.errors import CacheError, FetchError, SummarizationFailure
from congress_digest.storage import ChunkKey
from congress_digest.summarization import split_into_chunks
from fakes import (
    FakeFetcher,
    InMemoryChunkCache,
    InMemoryDocumentCache,
    ScriptedProvider,
    chunk_number,
    make_document,
)


# ==================== Cache Fakes ====================

class TestInMemoryDocumentCache:
    """Test InMemoryDocumentCache fake implementation."""

    def test_empty_summary_reads_as_absent(self):
        cache = InMemoryDocumentCache()
        cache.put("171-12", "")

        assert cache.get("171-12") is None

    def test_failure_switches(self):
        cache = InMemoryDocumentCache(fail_reads=True, fail_writes=True)

        with pytest.raises(CacheError):
            cache.get("171-12")
        with pytest.raises(CacheError):
            cache.put("171-12", "summary")
        assert cache.writes == []


class TestInMemoryChunkCache:
    """Test InMemoryChunkCache fake implementation."""

    def test_split_key_is_part_of_identity(self):
        cache = InMemoryChunkCache()
        cache.seed("171-12", "w3", {0: "S0"})

        assert cache.get(ChunkKey("171-12", 0, "w3")) == "S0"
        assert cache.get(ChunkKey("171-12", 0, "w5")) is None

    def test_selective_write_failure(self):
        cache = InMemoryChunkCache(fail_writes_for=[1])
        cache.put(ChunkKey("d", 0, "w3"), "S0", prompt_version="v1")

        with pytest.raises(CacheError):
            cache.put(ChunkKey("d", 1, "w3"), "S1")
        assert cache.indices("d") == [(0, "w3")]
        assert cache.prompt_versions[ChunkKey("d", 0, "w3")] == "v1"


# ==================== Provider Fakes ====================

class TestScriptedProvider:
    """Test ScriptedProvider and the document builder it pairs with."""

    def test_document_chunks_identify_themselves(self):
        chunks = split_into_chunks(make_document(4), 3)

        assert [chunk_number(c) for c in chunks] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_transient_failures_run_out(self):
        provider = ScriptedProvider(fail_times={0: 1})
        text = make_document(1)

        with pytest.raises(SummarizationFailure):
            await provider.summarize(text)
        assert await provider.summarize(text) == "S0"
        assert provider.called_chunks == [0, 0]

    @pytest.mark.asyncio
    async def test_fetcher_failure_carries_status(self):
        fetcher = FakeFetcher(fail=True)

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://x/a.pdf")
        assert exc_info.value.status == 404
        assert fetcher.urls == ["https://x/a.pdf"]
