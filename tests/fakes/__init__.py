"""
Fake implementations for testing.

Fakes are simplified working implementations of the summarization
collaborators, following the "fakes over mocks" approach: they implement the
same interface as the real components but keep state in memory.

Key fakes:
- InMemoryDocumentCache / InMemoryChunkCache: dict-backed caches with
  switchable read and write failures
- ScriptedProvider: deterministic chunk summarizer that records calls
- FakeFetcher / FixedExtractor: PDF source without network or pypdf
"""

from .caches import InMemoryChunkCache, InMemoryDocumentCache
from .providers import (
    FakeFetcher,
    FixedExtractor,
    ScriptedProvider,
    chunk_number,
    make_document,
)

__all__ = [
    "InMemoryChunkCache",
    "InMemoryDocumentCache",
    "FakeFetcher",
    "FixedExtractor",
    "ScriptedProvider",
    "chunk_number",
    "make_document",
]
