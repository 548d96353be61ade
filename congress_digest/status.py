"""
Run state tracking for document summarization.

Each summarization request walks these states in order; a request never
re-enters a state it already left.
"""

from __future__ import annotations

from enum import Enum


class RunState(str, Enum):
    """State of a document summarization run."""

    CHECK_DOCUMENT_CACHE = "check_document_cache"
    FETCH = "fetch"
    EXTRACT = "extract"
    SPLIT = "split"
    PER_CHUNK = "per_chunk"
    ASSEMBLE = "assemble"
    STORE_DOCUMENT_CACHE = "store_document_cache"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state."""
        return self in (RunState.DONE, RunState.FAILED, RunState.CANCELLED)
