"""
Digest Worker entry point.

Starts the Celery worker with the embedded beat scheduler.
"""

from __future__ import annotations

import os

from congress_digest.config import configure_logging, get_settings
from congress_digest.worker.celery_app import celery_app

# Import tasks to register them
from congress_digest.worker import tasks  # noqa: F401


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    celery_app.worker_main(
        argv=[
            "worker",
            "--beat",
            f"--concurrency={os.getenv('CELERY_CONCURRENCY', '2')}",
            f"--loglevel={settings.log_level}",
            "--hostname=digest-worker@%h",
        ]
    )


if __name__ == "__main__":
    main()
