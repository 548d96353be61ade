"""Error taxonomy for the digest pipeline.

Every failure that crosses a layer boundary is one of these types. The HTTP
boundary maps ``kind`` and ``status_code`` straight into the response body and
status, so each kind yields a distinct message for callers.
"""

from __future__ import annotations

from typing import Optional


class DigestError(Exception):
    """Base class for pipeline errors."""

    kind = "digest_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind}


class FetchError(DigestError):
    """Source bytes unreachable or returned a non-success status."""

    kind = "fetch_error"
    status_code = 502

    def __init__(self, message: str, *, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ExtractError(DigestError):
    """Source bytes could not be converted to text."""

    kind = "extract_error"
    status_code = 422


class SummarizationFailure(DigestError):
    """External text-generation call failed or returned unusable content."""

    kind = "summarization_failure"
    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        upstream_status: Optional[int] = None,
        chunk_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.chunk_index = chunk_index


class CacheError(DigestError):
    """Summary store unreachable or write rejected."""

    kind = "cache_error"
    status_code = 503


class FeedError(DigestError):
    """Upstream record feed returned an unusable response."""

    kind = "feed_error"
    status_code = 502


class AmbiguousIssue(DigestError):
    """Issue number without a volume matches stored issues in several volumes."""

    kind = "ambiguous_issue"
    status_code = 422


class SummarizationCancelled(DigestError):
    """Run stopped before completion by an explicit cancel."""

    kind = "cancelled"
    status_code = 409


_STATUS_BY_KIND = {
    cls.kind: cls.status_code
    for cls in (
        DigestError,
        AmbiguousIssue,
        FetchError,
        ExtractError,
        SummarizationFailure,
        SummarizationCancelled,
        CacheError,
        FeedError,
    )
}


def status_for_kind(kind: str) -> int:
    """HTTP status for an error kind; unknown kinds are server errors."""
    return _STATUS_BY_KIND.get(kind, 500)
