"""
Celery configuration for the digest worker.

Runs the scheduled congress.gov feed refresh and background summarization.
"""

from __future__ import annotations

from typing import Optional

from celery import Celery

from congress_digest.config import Settings, get_settings

REFRESH_TASK = "congress_digest.worker.tasks.refresh_records"
SUMMARIZE_TASK = "congress_digest.worker.tasks.summarize_issue"


def create_celery_app(settings: Optional[Settings] = None) -> Celery:
    """Create the Celery application from settings."""
    settings = settings or get_settings()

    app = Celery(
        "congress_digest",
        broker=settings.effective_celery_broker_url,
        backend=settings.effective_celery_result_backend,
        include=["congress_digest.worker.tasks"],
    )

    app.conf.update(
        # Task execution settings
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,

        # Task result settings
        result_expires=86400,  # 24 hours
        result_extended=True,

        # Task acknowledgment settings
        task_acks_late=True,
        task_reject_on_worker_lost=True,

        # Worker settings
        worker_prefetch_multiplier=1,

        # Monitoring
        task_track_started=True,

        # Beat scheduler
        beat_schedule={
            "refresh-congressional-records": {
                "task": REFRESH_TASK,
                "schedule": settings.congress.refresh_interval,
            },
        },
    )
    return app


celery_app = create_celery_app()

