"""
SQLAlchemy ORM models for the digest service.

These models define the database schema for upstream record metadata and
the two summary caches (whole documents and individual chunks).
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CongressionalRecord(Base):
    """Daily Congressional Record issue as listed by the congress.gov feed."""

    __tablename__ = "congressional_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Same key the summary caches use for this issue
    document_key = Column(String, nullable=False, unique=True)
    issue_number = Column(String, nullable=False)
    volume_number = Column(String, nullable=True)
    congress = Column(Integer, nullable=True)
    session_number = Column(Integer, nullable=True)
    # ISO-8601 strings as returned by the feed; lexical order is date order
    issue_date = Column(String, nullable=True)
    update_date = Column(String, nullable=True)
    url = Column(Text, nullable=True)
    # Full per-issue payload (section PDF links live under issue.fullIssue)
    contents = Column(JSON, nullable=True)
    fetched_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("issue_number", "volume_number", name="uq_record_issue_volume"),
        Index("idx_records_issue_date", "issue_date"),
    )


class DocumentSummary(Base):
    """Document Cache row: the assembled summary of one issue PDF."""

    __tablename__ = "document_summaries"

    document_key = Column(String, primary_key=True)
    summary = Column(Text, nullable=False)
    pdf_url = Column(Text, nullable=True)
    prompt_version = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


class ChunkSummary(Base):
    """Chunk Cache row: the summary of one word-bounded slice of a document."""

    __tablename__ = "chunk_summaries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_key = Column(String, nullable=False)
    chunk_index = Column(Integer, nullable=False)
    # Split configuration the index was computed under (e.g. "w20000")
    split_key = Column(String, nullable=False)
    summary = Column(Text, nullable=False)
    prompt_version = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "document_key", "chunk_index", "split_key", name="uq_chunk_identity"
        ),
        Index("idx_chunk_summaries_document", "document_key"),
    )
