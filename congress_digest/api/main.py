from contextlib import asynccontextmanager
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from congress_digest import __version__
from congress_digest.api.routes import router as api_router
from congress_digest.config import Settings, configure_logging, get_settings
from congress_digest.db import Database
from congress_digest.errors import DigestError
from congress_digest.records import CongressRecordClient
from congress_digest.storage import RecordStore, SqlSummaryCache
from congress_digest.summarization import SummarizationOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    orchestrator: Optional[SummarizationOrchestrator] = None,
    feed_client: Optional[CongressRecordClient] = None,
) -> FastAPI:
    """Build the API application.

    Anything passed in is used as-is and left open at shutdown; anything
    missing is built from ``settings`` at startup and closed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan_context(app: FastAPI):
        # Startup
        db = database or Database(settings.database)
        if database is None and db.dialect_name == "sqlite":
            # Local development; deployments run Alembic migrations
            db.create_all()

        http_client: Optional[httpx.AsyncClient] = None
        runner = orchestrator
        if runner is None:
            http_client = httpx.AsyncClient(timeout=settings.summarization.request_timeout)
            runner = build_orchestrator(settings.summarization, SqlSummaryCache(db), client=http_client)

        feed = feed_client
        if feed is None:
            congress = settings.congress
            feed = CongressRecordClient(
                base_url=congress.base_url,
                api_key=congress.api_key.get_secret_value() if congress.api_key else None,
                page_size=congress.page_size,
                max_pages=congress.max_pages,
                retries=congress.retries,
                retry_backoff=congress.retry_backoff,
                timeout=congress.timeout,
            )

        app.state.settings = settings
        app.state.database = db
        app.state.summary_cache = SqlSummaryCache(db)
        app.state.record_store = RecordStore(db)
        app.state.orchestrator = runner
        app.state.feed_client = feed

        logger.info(
            f"Started {settings.service_name} ({settings.environment})",
            extra={"database_dialect": db.dialect_name},
        )

        try:
            yield
        finally:
            # Shutdown
            for key in runner.in_flight():
                runner.cancel(key)
            if feed_client is None:
                await feed.aclose()
            if http_client is not None:
                await http_client.aclose()
            if database is None:
                db.dispose()
            logger.info("Shutdown complete")

    app = FastAPI(title="congressional record digest", version=__version__, lifespan=lifespan_context)

    @app.exception_handler(DigestError)
    async def digest_error_handler(request: Request, exc: DigestError) -> JSONResponse:
        logger.warning(
            f"Request failed: {exc.message}",
            extra={"kind": exc.kind, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(api_router)
    return app


def _create_default_app() -> FastAPI:
    configure_logging(get_settings())
    return create_app()


app = _create_default_app()
