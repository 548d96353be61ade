from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from congress_digest.api.deps import get_app_settings, get_feed_client, get_record_store
from congress_digest.api.schemas import (
    RecordListResponse,
    RefreshResponse,
    RecordResponse,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SectionResponse,
)
from congress_digest.config import Settings
from congress_digest.records import RecordFeed, refresh_records, with_api_key
from congress_digest.storage import RecordFilters, RecordStore, StoredRecord, build_preview

logger = logging.getLogger(__name__)

router = APIRouter()


def _api_key(settings: Settings) -> Optional[str]:
    key = settings.congress.api_key
    return key.get_secret_value() if key else None


@router.get("/records", response_model=RecordListResponse)
def list_records(
    limit: Optional[int] = Query(default=None, gt=0),
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
):
    """Stored records, newest issue first."""
    api_key = _api_key(settings)
    records = store.list_records(limit=limit)
    logger.info("Listing records", extra={"record_count": len(records)})
    return RecordListResponse(
        data=[
            RecordResponse(
                document_key=r.document_key,
                issue_number=r.issue_number,
                volume_number=r.volume_number,
                congress=r.congress,
                session_number=r.session_number,
                issue_date=r.issue_date,
                update_date=r.update_date,
                url=with_api_key(r.url, api_key),
                fetched_at=r.fetched_at,
                summary=r.summary,
                contents=r.contents,
            )
            for r in records
        ]
    )


@router.post("/records/refresh", response_model=RefreshResponse)
async def refresh(
    store: RecordStore = Depends(get_record_store),
    feed: RecordFeed = Depends(get_feed_client),
):
    """Pull the congress.gov feed now instead of waiting for the schedule."""
    counts = await refresh_records(store, feed)
    return RefreshResponse(**counts)


@router.post("/records/search", response_model=SearchResponse)
def search_records(
    payload: SearchRequest,
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
):
    """Filter stored records and match a keyword over summaries and contents."""
    f = payload.filters
    filters = RecordFilters(
        start_date=f.start_date,
        end_date=f.end_date,
        volume_number=str(f.volume_number) if f.volume_number is not None else None,
        session_number=f.session_number,
        has_summary_only=f.has_summary_only,
        sections=list(f.sections),
    )
    records = store.search(filters, query=payload.query, limit=payload.limit)
    api_key = _api_key(settings)
    results = [_to_search_result(r, api_key) for r in records]
    return SearchResponse(count=len(results), data=results, applied_filters=payload.filters)


def _to_search_result(record: StoredRecord, api_key: Optional[str]) -> SearchResult:
    return SearchResult(
        id=str(record.id),
        document_key=record.document_key,
        issue_number=record.issue_number,
        issue_date=record.issue_date,
        volume_number=record.volume_number,
        session_number=record.session_number,
        url=with_api_key(record.url, api_key),
        pdf_url=record.pdf_url,
        summary_preview=build_preview(record.summary),
        sections=[
            SectionResponse(key=s.key, label=s.label, url=s.url, present=s.present)
            for s in record.sections
            if s.present
        ],
        has_summary=record.has_summary,
        updated_at=record.update_date
        or (record.fetched_at.isoformat() if record.fetched_at else None),
    )
