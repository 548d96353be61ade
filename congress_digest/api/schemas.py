"""Request and response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SummarizeRequest(_CamelModel):
    """Summarize one Congressional Record issue PDF."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    pdf_url: str = Field(alias="pdfUrl", min_length=1)
    issue_number: Union[str, int] = Field(alias="issueNumber")
    volume_number: Optional[Union[str, int]] = Field(default=None, alias="volumeNumber")
    max_words: Optional[int] = Field(default=None, alias="maxWords", gt=0)
    stream: bool = True

    @field_validator("issue_number")
    @classmethod
    def _issue_not_blank(cls, value: Union[str, int]) -> Union[str, int]:
        if isinstance(value, str) and not value.strip():
            raise ValueError("issueNumber must not be empty")
        return value


class SummaryResponse(_CamelModel):
    summary: str
    document_key: str = Field(alias="documentKey")
    cached: bool = False
    persisted: bool = True
    chunk_count: int = Field(default=0, alias="chunkCount")


class ErrorResponse(BaseModel):
    error: str
    kind: str


class SummaryStatusResponse(_CamelModel):
    """Cache state of one document."""

    document_key: str = Field(alias="documentKey")
    has_summary: bool = Field(alias="hasSummary")
    cached_chunks: int = Field(alias="cachedChunks")
    in_progress: bool = Field(alias="inProgress")


class SectionResponse(_CamelModel):
    key: str
    label: str
    url: Optional[str] = None
    present: bool = False


class RecordResponse(_CamelModel):
    """Stored record as returned by the listing."""

    document_key: str = Field(alias="documentKey")
    issue_number: str = Field(alias="issueNumber")
    volume_number: Optional[str] = Field(default=None, alias="volumeNumber")
    congress: Optional[int] = None
    session_number: Optional[int] = Field(default=None, alias="sessionNumber")
    issue_date: Optional[str] = Field(default=None, alias="issueDate")
    update_date: Optional[str] = Field(default=None, alias="updateDate")
    url: Optional[str] = None
    fetched_at: Optional[datetime] = Field(default=None, alias="fetchedAt")
    summary: Optional[str] = None
    contents: Optional[Dict[str, Any]] = None


class RecordListResponse(BaseModel):
    success: bool = True
    data: List[RecordResponse]


class RefreshResponse(BaseModel):
    success: bool = True
    fetched: int
    inserted: int
    existing: int


class SearchFilters(_CamelModel):
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    volume_number: Optional[Union[str, int]] = Field(default=None, alias="volumeNumber")
    session_number: Optional[int] = Field(default=None, alias="sessionNumber")
    has_summary_only: bool = Field(default=False, alias="hasSummaryOnly")
    sections: List[str] = Field(default_factory=list)


class SearchRequest(_CamelModel):
    query: str = ""
    filters: SearchFilters = Field(default_factory=SearchFilters)
    limit: int = Field(default=40, gt=0, le=250)


class SearchResult(_CamelModel):
    id: str
    document_key: str = Field(alias="documentKey")
    issue_number: str = Field(alias="issueNumber")
    issue_date: Optional[str] = Field(default=None, alias="issueDate")
    volume_number: Optional[str] = Field(default=None, alias="volumeNumber")
    session_number: Optional[int] = Field(default=None, alias="sessionNumber")
    url: Optional[str] = None
    pdf_url: Optional[str] = Field(default=None, alias="pdfUrl")
    summary_preview: Optional[str] = Field(default=None, alias="summaryPreview")
    sections: List[SectionResponse] = Field(default_factory=list)
    has_summary: bool = Field(alias="hasSummary")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class SearchResponse(_CamelModel):
    success: bool = True
    count: int
    data: List[SearchResult]
    applied_filters: SearchFilters = Field(alias="appliedFilters")


class HealthResponse(BaseModel):
    status: str
    database: bool
    provider: bool
    provider_error: Optional[str] = None
    in_flight: int = 0
