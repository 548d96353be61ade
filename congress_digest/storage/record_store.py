"""
Congressional Record store.

Persists issue metadata pulled from the congress.gov feed and serves the
listing and search views. Summaries are read from the Document Cache table
through an outer join on the document key.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from congress_digest.db import CongressionalRecord, Database, DocumentSummary
from congress_digest.errors import AmbiguousIssue, CacheError
from .sql_cache import dialect_insert
from .summary_cache import document_key

logger = logging.getLogger(__name__)

# Content keys under issue.fullIssue mapped to display labels
SECTION_KEYS: Dict[str, str] = {
    "entireIssue": "Entire Issue",
    "houseSection": "House",
    "senateSection": "Senate",
    "extensionsSection": "Extensions",
    "dailyDigest": "Daily Digest",
}

# Rows scanned before keyword matching and section filtering
SEARCH_WINDOW = 250


@dataclass
class FeedRecord:
    """One issue as returned by the congress.gov feed."""

    issue_number: str
    volume_number: Optional[str] = None
    congress: Optional[int] = None
    session_number: Optional[int] = None
    issue_date: Optional[str] = None
    update_date: Optional[str] = None
    url: Optional[str] = None
    contents: Optional[Dict[str, Any]] = None

    @property
    def document_key(self) -> str:
        return document_key(self.issue_number, self.volume_number)


@dataclass
class Section:
    """PDF section of an issue."""

    key: str
    label: str
    url: Optional[str]

    @property
    def present(self) -> bool:
        return bool(self.url)


@dataclass
class StoredRecord:
    """Record row joined with its cached summary."""

    id: int
    document_key: str
    issue_number: str
    volume_number: Optional[str]
    congress: Optional[int]
    session_number: Optional[int]
    issue_date: Optional[str]
    update_date: Optional[str]
    url: Optional[str]
    contents: Optional[Dict[str, Any]]
    fetched_at: Optional[datetime]
    summary: Optional[str] = None
    sections: List[Section] = field(default_factory=list)

    @property
    def has_summary(self) -> bool:
        return bool(self.summary)

    @property
    def pdf_url(self) -> Optional[str]:
        """First entire-issue PDF, falling back to the record URL."""
        for section in self.sections:
            if section.key == "entireIssue" and section.url:
                return section.url
        return self.url


@dataclass
class RecordFilters:
    """Store-level search predicates. Unset fields do not filter."""

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    volume_number: Optional[str] = None
    session_number: Optional[int] = None
    has_summary_only: bool = False
    sections: List[str] = field(default_factory=list)


@dataclass
class StoreResult:
    """Outcome of storing a batch of feed records."""

    inserted: int = 0
    existing: int = 0


def extract_sections(contents: Optional[Dict[str, Any]]) -> List[Section]:
    """List every known section with the URL of its first PDF (if any)."""
    full_issue = ((contents or {}).get("issue") or {}).get("fullIssue") or {}
    sections = []
    for key, label in SECTION_KEYS.items():
        value = full_issue.get(key)
        if isinstance(value, list):
            url = value[0].get("url") if value and isinstance(value[0], dict) else None
        elif isinstance(value, dict):
            url = value.get("url")
        else:
            url = None
        sections.append(Section(key=key, label=label, url=url or None))
    return sections


def build_preview(summary: Optional[str], max_length: int = 420) -> Optional[str]:
    """Trim a summary for listing, marking truncation with an ellipsis."""
    if not summary:
        return None
    if len(summary) > max_length:
        return summary[:max_length] + "…"
    return summary


def pdf_url_for(record: StoredRecord) -> Optional[str]:
    """PDF to summarize for a record."""
    return record.pdf_url


def matches_keyword(record: StoredRecord, query: str) -> bool:
    """Case-insensitive substring match over summary and raw contents."""
    lowered = query.strip().lower()
    if not lowered:
        return True
    if record.summary and lowered in record.summary.lower():
        return True
    return lowered in json.dumps(record.contents or {}).lower()


class RecordStore:
    """Record persistence and queries over the shared ``Database``."""

    def __init__(self, database: Database):
        self.database = database

    def store_new(self, records: List[FeedRecord]) -> StoreResult:
        """Insert records whose (issue, volume) pair is not stored yet.

        Existing rows are left untouched.
        """
        result = StoreResult()
        if not records:
            logger.info("No new records to store")
            return result

        insert = dialect_insert(self.database.dialect_name)
        try:
            with self.database.session() as session:
                for record in records:
                    stmt = (
                        insert(CongressionalRecord)
                        .values(
                            document_key=record.document_key,
                            issue_number=record.issue_number,
                            volume_number=record.volume_number,
                            congress=record.congress,
                            session_number=record.session_number,
                            issue_date=record.issue_date,
                            update_date=record.update_date,
                            url=record.url,
                            contents=record.contents,
                        )
                        .on_conflict_do_nothing()
                    )
                    if session.execute(stmt).rowcount:
                        result.inserted += 1
                    else:
                        result.existing += 1
        except SQLAlchemyError as e:
            raise CacheError(f"Failed to store records: {e}") from e

        logger.info(
            "Stored congressional records",
            extra={"inserted": result.inserted, "existing": result.existing},
        )
        return result

    def list_records(self, limit: Optional[int] = None) -> List[StoredRecord]:
        """All records, newest issue first."""
        return self._query(RecordFilters(), limit=limit)

    def get_record(self, key: str) -> Optional[StoredRecord]:
        rows = self._query(RecordFilters(), limit=1, document_key=key)
        return rows[0] if rows else None

    def document_key_for(
        self,
        issue_number: Union[str, int],
        volume_number: Union[str, int, None] = None,
    ) -> str:
        """Cache key for an issue, filling in the volume from stored records.

        Without a volume the key is the bare issue number unless exactly one
        stored volume has that issue, so summaries line up with records.

        Raises:
            AmbiguousIssue: several stored volumes have this issue number
        """
        if volume_number is None or not str(volume_number).strip():
            volumes = self.volumes_for_issue(str(issue_number))
            if len(volumes) > 1:
                raise AmbiguousIssue(
                    f"Issue {issue_number} exists in volumes {', '.join(volumes)}; "
                    "pass volumeNumber"
                )
            volume_number = volumes[0] if volumes else None
        return document_key(issue_number, volume_number)

    def volumes_for_issue(self, issue_number: str) -> List[str]:
        """Distinct volumes holding a stored issue with this number."""
        stmt = (
            select(CongressionalRecord.volume_number)
            .where(
                CongressionalRecord.issue_number == str(issue_number).strip(),
                CongressionalRecord.volume_number.is_not(None),
            )
            .distinct()
            .order_by(CongressionalRecord.volume_number)
        )
        try:
            with self.database.session() as session:
                return list(session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            raise CacheError(f"Record query failed: {e}") from e

    def search(
        self,
        filters: Optional[RecordFilters] = None,
        query: str = "",
        limit: int = 40,
    ) -> List[StoredRecord]:
        """Filter in the store, then match sections and keywords in memory."""
        filters = filters or RecordFilters()
        candidates = self._query(filters, limit=SEARCH_WINDOW)

        if filters.sections:
            wanted = set(filters.sections)
            candidates = [
                r for r in candidates
                if any(s.present and s.key in wanted for s in r.sections)
            ]

        if query and query.strip():
            candidates = [r for r in candidates if matches_keyword(r, query)]

        return candidates[:limit]

    def _query(
        self,
        filters: RecordFilters,
        *,
        limit: Optional[int],
        document_key: Optional[str] = None,
    ) -> List[StoredRecord]:
        stmt = select(CongressionalRecord, DocumentSummary.summary).outerjoin(
            DocumentSummary,
            DocumentSummary.document_key == CongressionalRecord.document_key,
        )
        if document_key is not None:
            stmt = stmt.where(CongressionalRecord.document_key == document_key)
        if filters.start_date:
            stmt = stmt.where(CongressionalRecord.issue_date >= filters.start_date)
        if filters.end_date:
            stmt = stmt.where(CongressionalRecord.issue_date <= filters.end_date)
        if filters.volume_number:
            stmt = stmt.where(CongressionalRecord.volume_number == str(filters.volume_number))
        if filters.session_number is not None:
            stmt = stmt.where(CongressionalRecord.session_number == filters.session_number)
        if filters.has_summary_only:
            stmt = stmt.where(DocumentSummary.summary.is_not(None), DocumentSummary.summary != "")

        stmt = stmt.order_by(CongressionalRecord.issue_date.desc(), CongressionalRecord.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            with self.database.session() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as e:
            raise CacheError(f"Record query failed: {e}") from e

        return [self._to_stored(record, summary) for record, summary in rows]

    @staticmethod
    def _to_stored(record: CongressionalRecord, summary: Optional[str]) -> StoredRecord:
        return StoredRecord(
            id=record.id,
            document_key=record.document_key,
            issue_number=record.issue_number,
            volume_number=record.volume_number,
            congress=record.congress,
            session_number=record.session_number,
            issue_date=record.issue_date,
            update_date=record.update_date,
            url=record.url,
            contents=record.contents,
            fetched_at=record.fetched_at,
            summary=summary or None,
            sections=extract_sections(record.contents),
        )
