"""
Summary cache contracts.

Two durable key-value stores sit in front of the text-generation service:

- ``DocumentCache`` maps a document key to the assembled summary.
- ``ChunkCache`` maps (document key, chunk index, split key) to one chunk
  summary.

Both are upserts by key (last writer wins). A backend failure raises
``CacheError``; implementations never report a miss or a hit they could not
verify.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union


def document_key(issue_number: Union[str, int], volume_number: Union[str, int, None] = None) -> str:
    """Build the cache identity of a Congressional Record issue.

    Issue numbers restart every volume, so the volume is part of the key
    whenever the caller knows it.

    >>> document_key(12, 171)
    '171-12'
    >>> document_key("12")
    '12'
    """
    issue = str(issue_number).strip()
    if not issue:
        raise ValueError("issue_number must not be empty")
    if volume_number is None or not str(volume_number).strip():
        return issue
    return f"{str(volume_number).strip()}-{issue}"


@dataclass(frozen=True)
class ChunkKey:
    """Identity of one cached chunk summary."""

    document_key: str
    chunk_index: int
    split_key: str

    def __post_init__(self) -> None:
        if self.chunk_index < 0:
            raise ValueError("chunk_index must be >= 0")


class DocumentCache(ABC):
    """Whole-document summary store."""

    @abstractmethod
    def get(self, document_key: str) -> Optional[str]:
        """Return the cached summary, or None if absent or empty."""
        raise NotImplementedError

    @abstractmethod
    def put(
        self,
        document_key: str,
        summary: str,
        *,
        pdf_url: Optional[str] = None,
        prompt_version: Optional[str] = None,
    ) -> None:
        """Create or overwrite the summary for ``document_key``."""
        raise NotImplementedError


class ChunkCache(ABC):
    """Per-chunk summary store."""

    @abstractmethod
    def get(self, key: ChunkKey) -> Optional[str]:
        """Return the cached chunk summary, or None if absent or empty."""
        raise NotImplementedError

    @abstractmethod
    def put(
        self,
        key: ChunkKey,
        summary: str,
        *,
        prompt_version: Optional[str] = None,
    ) -> None:
        """Create or overwrite the chunk summary for ``key``."""
        raise NotImplementedError
