"""
SQL summary cache.

Implements both cache contracts over the shared ``Database`` handle. Every
write is a single ``INSERT ... ON CONFLICT DO UPDATE`` statement, so a write
is atomic per key without read-modify-write races.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from congress_digest.db import ChunkSummary, Database, DocumentSummary
from congress_digest.errors import CacheError
from .summary_cache import ChunkCache, ChunkKey, DocumentCache

logger = logging.getLogger(__name__)


def dialect_insert(dialect_name: str):
    """Return the dialect ``insert`` construct supporting ON CONFLICT."""
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise CacheError(f"Upsert not supported for database dialect '{dialect_name}'")
    return insert


class SqlSummaryCache:
    """
    SQLAlchemy-backed Document Cache and Chunk Cache.

    Both contracts name their methods ``get``/``put``, so the store is handed
    to the orchestrator through its ``documents`` and ``chunks`` views.
    """

    def __init__(self, database: Database):
        self.database = database
        self.documents = _DocumentView(self)
        self.chunks = _ChunkView(self)

    # ==================== Document Operations ====================

    def get_document(self, document_key: str) -> Optional[str]:
        try:
            with self.database.session() as session:
                summary = session.execute(
                    select(DocumentSummary.summary).where(
                        DocumentSummary.document_key == document_key
                    )
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CacheError(f"Document cache lookup failed for {document_key}: {e}") from e
        return summary or None

    def put_document(
        self,
        document_key: str,
        summary: str,
        *,
        pdf_url: Optional[str] = None,
        prompt_version: Optional[str] = None,
    ) -> None:
        insert = dialect_insert(self.database.dialect_name)
        stmt = insert(DocumentSummary).values(
            document_key=document_key,
            summary=summary,
            pdf_url=pdf_url,
            prompt_version=prompt_version,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DocumentSummary.document_key],
            set_={
                "summary": stmt.excluded.summary,
                "pdf_url": stmt.excluded.pdf_url,
                "prompt_version": stmt.excluded.prompt_version,
                "updated_at": func.now(),
            },
        )
        try:
            with self.database.session() as session:
                session.execute(stmt)
        except SQLAlchemyError as e:
            raise CacheError(f"Document cache write failed for {document_key}: {e}") from e
        logger.debug(
            "Stored document summary",
            extra={"document_key": document_key, "summary_length": len(summary)},
        )

    # ==================== Chunk Operations ====================

    def get_chunk(self, key: ChunkKey) -> Optional[str]:
        try:
            with self.database.session() as session:
                summary = session.execute(
                    select(ChunkSummary.summary).where(
                        ChunkSummary.document_key == key.document_key,
                        ChunkSummary.chunk_index == key.chunk_index,
                        ChunkSummary.split_key == key.split_key,
                    )
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CacheError(f"Chunk cache lookup failed for {key}: {e}") from e
        return summary or None

    def put_chunk(
        self,
        key: ChunkKey,
        summary: str,
        *,
        prompt_version: Optional[str] = None,
    ) -> None:
        insert = dialect_insert(self.database.dialect_name)
        stmt = insert(ChunkSummary).values(
            document_key=key.document_key,
            chunk_index=key.chunk_index,
            split_key=key.split_key,
            summary=summary,
            prompt_version=prompt_version,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                ChunkSummary.document_key,
                ChunkSummary.chunk_index,
                ChunkSummary.split_key,
            ],
            set_={
                "summary": stmt.excluded.summary,
                "prompt_version": stmt.excluded.prompt_version,
                "updated_at": func.now(),
            },
        )
        try:
            with self.database.session() as session:
                session.execute(stmt)
        except SQLAlchemyError as e:
            raise CacheError(f"Chunk cache write failed for {key}: {e}") from e

    def count_chunks(self, document_key: str) -> int:
        """Number of cached chunks for a document across all split keys."""
        try:
            with self.database.session() as session:
                return session.execute(
                    select(func.count())
                    .select_from(ChunkSummary)
                    .where(ChunkSummary.document_key == document_key)
                ).scalar_one()
        except SQLAlchemyError as e:
            raise CacheError(f"Chunk count failed for {document_key}: {e}") from e


class _DocumentView(DocumentCache):
    def __init__(self, store: SqlSummaryCache):
        self._store = store

    def get(self, document_key: str) -> Optional[str]:
        return self._store.get_document(document_key)

    def put(self, document_key, summary, *, pdf_url=None, prompt_version=None) -> None:
        self._store.put_document(
            document_key, summary, pdf_url=pdf_url, prompt_version=prompt_version
        )


class _ChunkView(ChunkCache):
    def __init__(self, store: SqlSummaryCache):
        self._store = store

    def get(self, key: ChunkKey) -> Optional[str]:
        return self._store.get_chunk(key)

    def put(self, key, summary, *, prompt_version=None) -> None:
        self._store.put_chunk(key, summary, prompt_version=prompt_version)
