"""
Database module for the digest service.

Provides SQLAlchemy models and the per-process ``Database`` handle.
"""

from congress_digest.db.models import (
    Base,
    ChunkSummary,
    CongressionalRecord,
    DocumentSummary,
)
from congress_digest.db.session import Database, build_engine

__all__ = [
    # Lifecycle
    "Database",
    "build_engine",
    # SQLAlchemy models
    "Base",
    "ChunkSummary",
    "CongressionalRecord",
    "DocumentSummary",
]
