"""
Configuration for the Congressional Record digest service.

Provides environment-based configuration with Pydantic settings. Nested
groups are set with ``GROUP__FIELD`` variables (``SUMMARIZATION__MAX_WORDS``);
the handful of flat variables the deployment already uses (``DATABASE_URL``,
``OPENAI_API_KEY``, ``CONGRESS_API_KEY``) fill their nested field when the
nested variable is absent.
"""

from __future__ import annotations

import json
import logging
import sys
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from pydantic import AliasChoices, BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Durable store for records and summaries."""

    url: Optional[str] = None
    host: str = "localhost"
    port: int = 5432
    name: str = "congressional_summaries"
    user: str = "postgres"
    password: SecretStr = SecretStr("")
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False

    def sqlalchemy_url(self) -> str:
        """Explicit URL, or a PostgreSQL URL built from the parts."""
        if self.url:
            return self.url
        user = quote_plus(self.user)
        pwd = quote_plus(self.password.get_secret_value())
        return f"postgresql+psycopg://{user}:{pwd}@{self.host}:{self.port}/{self.name}"


class RedisSettings(BaseModel):
    """Celery broker and result backend."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None

    def url(self) -> str:
        """Build Redis URL."""
        if self.password:
            return f"redis://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class SummarizationSettings(BaseModel):
    """Text-generation endpoint and chunking settings."""

    api_base: str = "https://api.openai.com"
    api_key: Optional[SecretStr] = None
    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    max_words: int = Field(default=20000, gt=0)
    max_concurrency: int = Field(default=1, ge=1)
    request_timeout: float = Field(default=120.0, gt=0)
    chunk_retries: int = Field(default=2, ge=0)
    retry_backoff: float = Field(default=2.0, ge=0)
    separator: str = "\n\n"


class CongressApiSettings(BaseModel):
    """congress.gov record feed settings."""

    base_url: str = "https://api.congress.gov/v3"
    api_key: Optional[SecretStr] = None
    page_size: int = Field(default=250, gt=0, le=250)
    max_pages: int = Field(default=1, ge=1)
    retries: int = Field(default=3, ge=1)
    retry_backoff: float = Field(default=2.0, ge=0)
    timeout: float = Field(default=30.0, gt=0)
    refresh_interval: float = Field(default=3600.0, gt=0)


class Settings(BaseSettings):
    """Configuration for the API and worker processes."""

    service_name: str = Field(
        default="congress-digest",
        validation_alias=AliasChoices("SERVICE_NAME"),
    )
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "ENV"),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL"),
    )
    log_format: str = Field(
        default="text",
        validation_alias=AliasChoices("LOG_FORMAT"),
        description="Log format: 'json' or 'text'",
    )

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    summarization: SummarizationSettings = Field(default_factory=SummarizationSettings)
    congress: CongressApiSettings = Field(default_factory=CongressApiSettings)

    # Flat variables kept from the original deployment
    database_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL"),
        exclude=True,
    )
    openai_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY"),
        exclude=True,
    )
    congress_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("CONGRESS_API_KEY"),
        exclude=True,
    )

    # Celery configuration
    celery_broker_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CELERY_BROKER_URL"),
    )
    celery_result_backend: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CELERY_RESULT_BACKEND"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _apply_flat_overrides(self) -> "Settings":
        if self.database_url and not self.database.url:
            self.database.url = self.database_url
        if self.openai_api_key and self.summarization.api_key is None:
            self.summarization.api_key = self.openai_api_key
        if self.congress_api_key and self.congress.api_key is None:
            self.congress.api_key = self.congress_api_key
        return self

    @property
    def effective_celery_broker_url(self) -> str:
        """Broker override, else the Redis URL."""
        return self.celery_broker_url or self.redis.url()

    @property
    def effective_celery_result_backend(self) -> str:
        """Result backend override, else the Redis URL."""
        return self.celery_result_backend or self.redis.url()

    @property
    def sqlalchemy_url(self) -> str:
        """SQLAlchemy URL of the document store."""
        return self.database.sqlalchemy_url()


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read from the environment once."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Route all logging to stdout, as JSON lines or plain text.

    Args:
        settings: Settings to read level and format from; defaults to
            ``get_settings()``
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter(settings.service_name))
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger.addHandler(handler)

    # Third-party request logs drown out per-chunk progress
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


_RESERVED_RECORD_ATTRS = frozenset(
    (
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "funcName", "levelname", "levelno", "lineno", "message", "module",
        "msecs", "msg", "name", "pathname", "process", "processName",
        "relativeCreated", "stack_info", "taskName", "thread", "threadName",
    )
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter carrying ``extra`` fields."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
                log_record[key] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)
