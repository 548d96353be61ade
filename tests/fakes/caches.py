"""
Fake summary caches for testing.

InMemoryDocumentCache and InMemoryChunkCache implement the cache contracts
over plain dicts, with switches for simulating an unreachable store.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from congress_digest.errors import CacheError
from congress_digest.storage import ChunkCache, ChunkKey, DocumentCache


class InMemoryDocumentCache(DocumentCache):
    """
    Dict-backed Document Cache.

    Usage:
        cache = InMemoryDocumentCache()
        cache.put("171-12", "summary")
        assert cache.get("171-12") == "summary"
    """

    def __init__(self, fail_reads: bool = False, fail_writes: bool = False):
        self.entries: Dict[str, str] = {}
        self.metadata: Dict[str, dict] = {}
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.reads: List[str] = []
        self.writes: List[str] = []

    def get(self, document_key: str) -> Optional[str]:
        self.reads.append(document_key)
        if self.fail_reads:
            raise CacheError("document store unreachable")
        return self.entries.get(document_key) or None

    def put(self, document_key, summary, *, pdf_url=None, prompt_version=None) -> None:
        if self.fail_writes:
            raise CacheError("document write rejected")
        self.writes.append(document_key)
        self.entries[document_key] = summary
        self.metadata[document_key] = {"pdf_url": pdf_url, "prompt_version": prompt_version}


class InMemoryChunkCache(ChunkCache):
    """
    Dict-backed Chunk Cache keyed by ``ChunkKey``.

    ``fail_writes_for`` rejects writes for specific chunk indices only.
    """

    def __init__(
        self,
        fail_reads: bool = False,
        fail_writes: bool = False,
        fail_writes_for: Optional[List[int]] = None,
    ):
        self.entries: Dict[ChunkKey, str] = {}
        self.prompt_versions: Dict[ChunkKey, Optional[str]] = {}
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.fail_writes_for = set(fail_writes_for or [])
        self.writes: List[ChunkKey] = []

    def get(self, key: ChunkKey) -> Optional[str]:
        if self.fail_reads:
            raise CacheError("chunk store unreachable")
        return self.entries.get(key) or None

    def put(self, key, summary, *, prompt_version=None) -> None:
        if self.fail_writes or key.chunk_index in self.fail_writes_for:
            raise CacheError("chunk write rejected")
        self.writes.append(key)
        self.entries[key] = summary
        self.prompt_versions[key] = prompt_version

    def seed(self, document_key: str, split_key: str, summaries: Dict[int, str]) -> None:
        """Pre-populate entries for one document."""
        for index, summary in summaries.items():
            self.entries[ChunkKey(document_key, index, split_key)] = summary

    def indices(self, document_key: str) -> List[Tuple[int, str]]:
        return sorted(
            (key.chunk_index, key.split_key)
            for key in self.entries
            if key.document_key == document_key
        )
