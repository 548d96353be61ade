"""
congress.gov daily Congressional Record feed client.

Pulls the issue listing page by page and fetches each issue's full payload,
which carries the per-section PDF links.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from congress_digest.errors import FeedError
from congress_digest.storage.record_store import FeedRecord

logger = logging.getLogger(__name__)

FEED_PATH = "/daily-congressional-record"

_JSON_HEADERS = {"Accept": "application/json"}


def with_api_key(url: Optional[str], api_key: Optional[str]) -> Optional[str]:
    """Append ``api_key`` to a congress.gov URL for direct client use."""
    if not url or not api_key:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}api_key={api_key}"


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


class CongressRecordClient:
    """Async client for the daily Congressional Record listing."""

    def __init__(
        self,
        base_url: str = "https://api.congress.gov/v3",
        api_key: Optional[str] = None,
        *,
        page_size: int = 250,
        max_pages: int = 1,
        retries: int = 3,
        retry_backoff: float = 2.0,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize feed client.

        Args:
            base_url: congress.gov API root
            api_key: congress.gov API key
            page_size: Records requested per listing page (API maximum 250)
            max_pages: Listing pages fetched per refresh
            retries: Attempts per listing page
            retry_backoff: Base delay for exponential backoff between attempts
            timeout: Request timeout in seconds
            client: Shared client; one is created and owned if None
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.page_size = page_size
        self.max_pages = max_pages
        self.retries = max(1, retries)
        self.retry_backoff = retry_backoff
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=_JSON_HEADERS)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "CongressRecordClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _params(self, **extra: Any) -> Dict[str, Any]:
        params: Dict[str, Any] = {"format": "json", **extra}
        if self.api_key:
            params["api_key"] = self.api_key
        return params

    async def fetch_records(self) -> List[FeedRecord]:
        """Fetch listing pages and the full payload of every issue on them.

        Issues whose payload cannot be fetched are logged and left out.

        Raises:
            FeedError: a listing page kept failing after every retry
        """
        records: List[FeedRecord] = []
        for page in range(self.max_pages):
            listing = await self._fetch_page(offset=page * self.page_size)
            if not listing:
                break

            fetched = await asyncio.gather(
                *(self._fetch_issue(entry) for entry in listing if isinstance(entry, dict))
            )
            records.extend(record for record in fetched if record is not None)

            if len(listing) < self.page_size:
                break

        logger.info("Fetched congressional records", extra={"record_count": len(records)})
        return records

    async def _fetch_page(self, offset: int) -> List[Dict[str, Any]]:
        url = f"{self.base_url}{FEED_PATH}"
        last_error: Optional[Exception] = None

        for attempt in range(self.retries):
            try:
                response = await self._client.get(
                    url, params=self._params(limit=self.page_size, offset=offset)
                )
                response.raise_for_status()
                body = response.json()
                listing = body.get("dailyCongressionalRecord") if isinstance(body, dict) else None
                if not isinstance(listing, list):
                    raise FeedError("Invalid API response format: missing dailyCongressionalRecord")
                return listing
            except (httpx.HTTPError, ValueError, FeedError) as e:
                last_error = e
                logger.warning(
                    f"Error fetching congressional records (attempt {attempt + 1}/{self.retries}): {e}",
                    extra={"offset": offset},
                )
                if attempt + 1 < self.retries:
                    await asyncio.sleep(self.retry_backoff * (2 ** attempt))

        if isinstance(last_error, FeedError):
            raise last_error
        raise FeedError(f"Failed to fetch congressional records: {last_error}")

    async def _fetch_issue(self, entry: Dict[str, Any]) -> Optional[FeedRecord]:
        issue_number = _as_str(entry.get("issueNumber"))
        if issue_number is None:
            logger.warning("Skipping listing entry without issue number")
            return None

        url = entry.get("url")
        contents: Optional[Dict[str, Any]] = None
        if url:
            try:
                response = await self._client.get(url, params=self._params())
                response.raise_for_status()
                contents = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(
                    f"Error fetching report contents from {url}: {e}",
                    extra={"issue_number": issue_number},
                )
                return None

        return FeedRecord(
            issue_number=issue_number,
            volume_number=_as_str(entry.get("volumeNumber")),
            congress=_as_int(entry.get("congress")),
            session_number=_as_int(entry.get("sessionNumber")),
            issue_date=_as_str(entry.get("issueDate")),
            update_date=_as_str(entry.get("updateDate")),
            url=url,
            contents=contents,
        )
