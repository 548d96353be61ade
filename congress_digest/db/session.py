"""
Database lifecycle management.

``Database`` owns one SQLAlchemy engine (and so one connection pool) per
process. It is created at process start, handed to every store that needs
it, and disposed at shutdown.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from congress_digest.config import DatabaseSettings
from congress_digest.db.models import Base

logger = logging.getLogger(__name__)


def build_engine(settings: DatabaseSettings) -> Engine:
    """Create an Engine with pool options suited to the backend.

    SQLite (development and tests) gets a single shared connection usable
    from worker threads; every other backend gets a sized pool.
    """
    url = settings.sqlalchemy_url()
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

    return create_engine(
        url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        future=True,
    )


class Database:
    """Connection pool handle with explicit lifecycle."""

    def __init__(self, settings: DatabaseSettings, *, engine: Optional[Engine] = None):
        self.settings = settings
        self._engine: Optional[Engine] = engine or build_engine(settings)
        self._sessionmaker: sessionmaker[Session] = sessionmaker(
            bind=self._engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database has been disposed")
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Get a database session with automatic commit/rollback.

        Usage:
            with database.session() as session:
                session.add(model)
        """
        if self._engine is None:
            raise RuntimeError("Database has been disposed")
        session: Session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create tables from model metadata.

        Development and tests only; deployments run Alembic migrations.
        """
        Base.metadata.create_all(bind=self.engine)

    def check_connection(self) -> bool:
        """Check if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database connectivity check failed", exc_info=True)
            return False

    def dispose(self) -> None:
        """Close every pooled connection. The handle is unusable afterwards."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database engine disposed")
