from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from congress_digest.api.deps import get_database, get_orchestrator
from congress_digest.api.schemas import HealthResponse
from congress_digest.db import Database
from congress_digest.summarization import SummarizationOrchestrator

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    database: Database = Depends(get_database),
    orchestrator: SummarizationOrchestrator = Depends(get_orchestrator),
):
    """Database connectivity and text-generation provider reachability."""
    database_ok = await asyncio.to_thread(database.check_connection)
    provider = await orchestrator.provider.check_health()
    body = HealthResponse(
        status="ok" if database_ok and provider.healthy else "degraded",
        database=database_ok,
        provider=provider.healthy,
        provider_error=provider.error,
        in_flight=len(orchestrator.in_flight()),
    )
    # Provider outages degrade summarization only; the database is required
    return JSONResponse(status_code=200 if database_ok else 503, content=body.model_dump())
