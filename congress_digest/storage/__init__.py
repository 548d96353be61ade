"""
Storage module for the digest service.

Provides the summary cache contracts, their SQL implementation, and the
record store backing listing and search.
"""

from congress_digest.storage.summary_cache import (
    ChunkCache,
    ChunkKey,
    DocumentCache,
    document_key,
)
from congress_digest.storage.sql_cache import SqlSummaryCache
from congress_digest.storage.record_store import (
    SECTION_KEYS,
    FeedRecord,
    RecordFilters,
    RecordStore,
    Section,
    StoredRecord,
    StoreResult,
    build_preview,
    extract_sections,
    pdf_url_for,
)

__all__ = [
    # Cache contracts
    "ChunkCache",
    "ChunkKey",
    "DocumentCache",
    "document_key",
    # Implementations
    "SqlSummaryCache",
    "RecordStore",
    # Records
    "SECTION_KEYS",
    "FeedRecord",
    "RecordFilters",
    "Section",
    "StoredRecord",
    "StoreResult",
    "build_preview",
    "extract_sections",
    "pdf_url_for",
]
