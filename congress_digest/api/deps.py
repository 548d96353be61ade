"""Request-scoped accessors for objects the lifespan puts on ``app.state``."""

from __future__ import annotations

from fastapi import Request

from congress_digest.config import Settings
from congress_digest.db import Database
from congress_digest.records import RecordFeed
from congress_digest.storage import RecordStore, SqlSummaryCache
from congress_digest.summarization import SummarizationOrchestrator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_orchestrator(request: Request) -> SummarizationOrchestrator:
    return request.app.state.orchestrator


def get_summary_cache(request: Request) -> SqlSummaryCache:
    return request.app.state.summary_cache


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_feed_client(request: Request) -> RecordFeed:
    return request.app.state.feed_client
