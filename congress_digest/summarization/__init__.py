"""
Summarization module for the digest service.

Splits document text into word-bounded chunks, summarizes each chunk through
an LLM provider, and assembles the results with per-chunk caching.
"""

from congress_digest.summarization.chunker import WordChunker, split_into_chunks
from congress_digest.summarization.prompts import CONGRESSIONAL_RECORD_PROMPT, PromptTemplate
from congress_digest.summarization.providers import (
    ChatCompletionProvider,
    ProviderHealth,
    SummaryProvider,
)
from congress_digest.summarization.sources import PdfFetcher, PdfTextExtractor
from congress_digest.summarization.progress import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    ProgressChannel,
    ProgressEvent,
    StartEvent,
    to_ndjson,
)
from congress_digest.summarization.orchestrator import (
    SummarizationOrchestrator,
    SummaryJob,
    SummaryResult,
    assemble_summary,
)
from congress_digest.summarization.factory import build_orchestrator

__all__ = [
    # Chunking
    "WordChunker",
    "split_into_chunks",
    # Prompts and providers
    "CONGRESSIONAL_RECORD_PROMPT",
    "PromptTemplate",
    "ChatCompletionProvider",
    "ProviderHealth",
    "SummaryProvider",
    # Sources
    "PdfFetcher",
    "PdfTextExtractor",
    # Progress
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    "ProgressChannel",
    "ProgressEvent",
    "StartEvent",
    "to_ndjson",
    # Orchestration
    "SummarizationOrchestrator",
    "SummaryJob",
    "SummaryResult",
    "assemble_summary",
    "build_orchestrator",
]
