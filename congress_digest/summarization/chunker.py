"""Word-count chunking for document summarization."""
from __future__ import annotations

import logging
from typing import List

logger = logging.getLogger(__name__)


def split_into_chunks(text: str, max_words: int) -> List[str]:
    """Split text into consecutive groups of ``max_words`` words.

    Words are whitespace-delimited runs; each chunk re-joins its words with
    single spaces. Every chunk but the last holds exactly ``max_words``
    words. Empty or whitespace-only text yields no chunks.

    Args:
        text: Extracted document text
        max_words: Words per chunk, >= 1

    Returns:
        Ordered list of chunk texts
    """
    if max_words < 1:
        raise ValueError(f"max_words must be a positive integer, got {max_words}")

    words = (text or "").split()
    return [
        " ".join(words[start : start + max_words])
        for start in range(0, len(words), max_words)
    ]


class WordChunker:
    """Deterministic word-bounded chunker.

    The same text and ``max_words`` always produce the same boundaries, and
    ``split_key`` names that configuration so cached chunk summaries are only
    reused under the split they were computed with.
    """

    def __init__(self, max_words: int = 20000):
        """Initialize chunker.

        Args:
            max_words: Words per chunk
        """
        if max_words < 1:
            raise ValueError(f"max_words must be a positive integer, got {max_words}")
        self.max_words = max_words

    @property
    def split_key(self) -> str:
        """Identifier of this split configuration (e.g. ``"w20000"``)."""
        return f"w{self.max_words}"

    def chunk(self, text: str) -> List[str]:
        """Chunk document text into word-bounded segments."""
        chunks = split_into_chunks(text, self.max_words)
        logger.debug(
            "Segmented document",
            extra={"chunk_count": len(chunks), "max_words": self.max_words},
        )
        return chunks
