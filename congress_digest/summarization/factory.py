"""Builds a fully wired orchestrator from settings."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from congress_digest.config import SummarizationSettings
from congress_digest.storage.sql_cache import SqlSummaryCache
from .orchestrator import SummarizationOrchestrator
from .providers import ChatCompletionProvider
from .sources import PdfFetcher, PdfTextExtractor

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: SummarizationSettings,
    cache: SqlSummaryCache,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> SummarizationOrchestrator:
    """Create an orchestrator backed by the SQL caches.

    Args:
        settings: Summarization configuration
        cache: Summary store providing both cache views
        client: Shared HTTP client for the provider and fetcher; each call
            opens its own client if None
    """
    if settings.api_key is None:
        logger.warning("No text-generation API key configured; requests will be unauthenticated")

    provider = ChatCompletionProvider.from_settings(settings, client=client)
    logger.info(
        "Built summarization orchestrator",
        extra={
            "provider": provider.name,
            "prompt_version": provider.prompt.fingerprint,
            "max_words": settings.max_words,
            "max_concurrency": settings.max_concurrency,
        },
    )
    return SummarizationOrchestrator(
        document_cache=cache.documents,
        chunk_cache=cache.chunks,
        provider=provider,
        fetcher=PdfFetcher(timeout=settings.request_timeout, client=client),
        extractor=PdfTextExtractor(),
        max_words=settings.max_words,
        max_concurrency=settings.max_concurrency,
        chunk_timeout=settings.request_timeout,
        chunk_retries=settings.chunk_retries,
        retry_backoff=settings.retry_backoff,
        separator=settings.separator,
    )
