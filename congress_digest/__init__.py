"""
Congressional Record digest service.

Contains the code used by the API and the worker processes:
- config: Environment settings and logging setup
- errors: Error taxonomy shared by every layer
- status: Summarization run states
- db: Database models and connection lifecycle
- storage: Document and chunk summary caches
- summarization: Chunking, prompting, provider calls and orchestration
- records: congress.gov feed client and record store
- api: FastAPI application
- worker: Celery application and scheduled tasks
"""

from congress_digest.errors import (
    AmbiguousIssue,
    CacheError,
    DigestError,
    ExtractError,
    FeedError,
    FetchError,
    SummarizationCancelled,
    SummarizationFailure,
    status_for_kind,
)
from congress_digest.status import RunState

__version__ = "0.4.0"

__all__ = [
    "AmbiguousIssue",
    "CacheError",
    "DigestError",
    "ExtractError",
    "FeedError",
    "FetchError",
    "SummarizationCancelled",
    "SummarizationFailure",
    "RunState",
    "status_for_kind",
]
