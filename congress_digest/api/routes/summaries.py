from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse

from congress_digest.api.deps import get_orchestrator, get_record_store, get_summary_cache
from congress_digest.api.schemas import (
    ErrorResponse,
    SummarizeRequest,
    SummaryResponse,
    SummaryStatusResponse,
)
from congress_digest.errors import DigestError, status_for_kind
from congress_digest.storage import RecordStore, SqlSummaryCache
from congress_digest.summarization import (
    ErrorEvent,
    ProgressEvent,
    SummarizationOrchestrator,
    to_ndjson,
)

logger = logging.getLogger(__name__)

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def _error_response(error: str, kind: str) -> JSONResponse:
    return JSONResponse(status_code=status_for_kind(kind), content={"error": error, "kind": kind})


@router.post(
    "/summaries",
    response_model=SummaryResponse,
    responses={
        200: {"content": {NDJSON_MEDIA_TYPE: {}}},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def create_summary(
    payload: SummarizeRequest,
    orchestrator: SummarizationOrchestrator = Depends(get_orchestrator),
    store: RecordStore = Depends(get_record_store),
):
    """Summarize an issue PDF, streaming NDJSON progress unless ``stream`` is false."""
    key = await asyncio.to_thread(
        store.document_key_for, payload.issue_number, payload.volume_number
    )
    logger.info(
        "Summary requested",
        extra={"document_key": key, "pdf_url": payload.pdf_url, "stream": payload.stream},
    )

    if not payload.stream:
        try:
            result = await orchestrator.summarize_document(
                key, payload.pdf_url, max_words=payload.max_words
            )
        except DigestError as e:
            return _error_response(e.message, e.kind)
        return SummaryResponse(
            summary=result.summary,
            document_key=result.document_key,
            cached=result.cached,
            persisted=result.persisted,
            chunk_count=result.chunk_count,
        )

    events = orchestrator.stream(key, payload.pdf_url, max_words=payload.max_words)
    first = await events.__anext__()
    if isinstance(first, ErrorEvent):
        await events.aclose()
        return _error_response(first.error, first.kind)

    return StreamingResponse(
        _ndjson_body(first, events),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache"},
    )


async def _ndjson_body(
    first: ProgressEvent, events: AsyncIterator[ProgressEvent]
) -> AsyncIterator[str]:
    try:
        yield to_ndjson(first)
        async for event in events:
            yield to_ndjson(event)
    finally:
        # Detaching the last subscriber stops the run
        await events.aclose()


@router.get("/summaries/{key}", response_model=SummaryStatusResponse)
async def get_summary_status(
    key: str,
    cache: SqlSummaryCache = Depends(get_summary_cache),
    orchestrator: SummarizationOrchestrator = Depends(get_orchestrator),
) -> SummaryStatusResponse:
    summary = await asyncio.to_thread(cache.get_document, key)
    chunks = await asyncio.to_thread(cache.count_chunks, key)
    return SummaryStatusResponse(
        document_key=key,
        has_summary=bool(summary),
        cached_chunks=chunks,
        in_progress=key in orchestrator.in_flight(),
    )


@router.delete("/summaries/{key}/run", status_code=202)
async def cancel_summary(
    key: str,
    orchestrator: SummarizationOrchestrator = Depends(get_orchestrator),
) -> dict:
    """Stop an in-flight run. Chunks already summarized stay cached."""
    if not orchestrator.cancel(key):
        raise HTTPException(status_code=404, detail="no summarization in progress")
    return {"documentKey": key, "cancelled": True}
