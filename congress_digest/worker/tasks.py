"""
Digest Worker Celery Tasks.

Defines the scheduled feed refresh and background summarization tasks.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

import httpx
from celery import Task
from celery.signals import worker_process_shutdown

from congress_digest.config import Settings, get_settings
from congress_digest.db import Database
from congress_digest.errors import FetchError, SummarizationFailure
from congress_digest.records import CongressRecordClient, refresh_records as refresh_store
from congress_digest.storage import RecordStore, SqlSummaryCache
from congress_digest.summarization import build_orchestrator
from .celery_app import REFRESH_TASK, SUMMARIZE_TASK, celery_app

logger = logging.getLogger(__name__)


class DigestTask(Task):
    """Base class giving each worker process one lazily opened ``Database``."""

    _database: Optional[Database] = None

    @property
    def settings(self) -> Settings:
        return get_settings()

    @property
    def database(self) -> Database:
        if DigestTask._database is None:
            DigestTask._database = Database(self.settings.database)
        return DigestTask._database

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Handle task failure."""
        logger.error(
            f"Digest task failed: {exc}",
            exc_info=True,
            extra={"task_id": task_id, "task_kwargs": kwargs},
        )


@worker_process_shutdown.connect
def _dispose_database(**_kwargs) -> None:
    if DigestTask._database is not None:
        DigestTask._database.dispose()
        DigestTask._database = None


async def summarize(
    settings: Settings,
    database: Database,
    pdf_url: str,
    issue_number: Union[str, int],
    volume_number: Union[str, int, None] = None,
    max_words: Optional[int] = None,
) -> dict:
    """Run one document through the orchestrator to completion."""
    key = await asyncio.to_thread(
        RecordStore(database).document_key_for, issue_number, volume_number
    )
    async with httpx.AsyncClient(timeout=settings.summarization.request_timeout) as client:
        orchestrator = build_orchestrator(
            settings.summarization, SqlSummaryCache(database), client=client
        )
        result = await orchestrator.summarize_document(key, pdf_url, max_words=max_words)
    return {
        "document_key": result.document_key,
        "cached": result.cached,
        "persisted": result.persisted,
        "chunk_count": result.chunk_count,
        "summary_length": len(result.summary),
    }


@celery_app.task(base=DigestTask, bind=True, name=REFRESH_TASK)
def refresh_records(self) -> dict:
    """Pull the congress.gov feed and store new issues.

    Returns:
        Counts of fetched, inserted and already stored records
    """
    logger.info("Starting congressional record refresh", extra={"task_id": self.request.id})
    congress = self.settings.congress

    async def _run() -> dict:
        async with CongressRecordClient(
            base_url=congress.base_url,
            api_key=congress.api_key.get_secret_value() if congress.api_key else None,
            page_size=congress.page_size,
            max_pages=congress.max_pages,
            retries=congress.retries,
            retry_backoff=congress.retry_backoff,
            timeout=congress.timeout,
        ) as client:
            return await refresh_store(RecordStore(self.database), client)

    return asyncio.run(_run())


@celery_app.task(
    base=DigestTask,
    bind=True,
    name=SUMMARIZE_TASK,
    autoretry_for=(SummarizationFailure, FetchError),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_jitter=True,
    max_retries=3,
)
def summarize_issue(
    self,
    pdf_url: str,
    issue_number: Union[str, int],
    volume_number: Union[str, int, None] = None,
    max_words: Optional[int] = None,
) -> dict:
    """
    Summarize one issue in the background.

    Chunks cached by a failed attempt are reused by the retry.

    Args:
        pdf_url: Issue PDF location
        issue_number: Issue number
        volume_number: Volume number, if known
        max_words: Words per chunk override

    Returns:
        Summary metadata (the text itself lives in the Document Cache)
    """
    logger.info(
        "Starting background summarization",
        extra={"task_id": self.request.id, "pdf_url": pdf_url, "issue_number": issue_number},
    )
    return asyncio.run(
        summarize(self.settings, self.database, pdf_url, issue_number, volume_number, max_words)
    )
