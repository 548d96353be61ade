"""Source document fetching and text extraction."""
from __future__ import annotations

import io
import logging
from typing import Optional

import httpx
from pypdf import PdfReader

from congress_digest.errors import ExtractError, FetchError

logger = logging.getLogger(__name__)


class PdfFetcher:
    """Downloads source PDF bytes."""

    def __init__(self, timeout: float = 60.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client

    async def fetch(self, url: str) -> bytes:
        """Fetch the bytes at ``url``.

        Raises:
            FetchError: transport failure or non-success status
        """
        try:
            if self._client is not None:
                response = await self._client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch {url}: {e}", url=url) from e

        if response.status_code >= 400:
            raise FetchError(
                f"Fetching {url} returned HTTP {response.status_code}",
                url=url,
                status=response.status_code,
            )

        logger.debug("Fetched source document", extra={"url": url, "size_bytes": len(response.content)})
        return response.content


class PdfTextExtractor:
    """Converts PDF bytes to plain text."""

    def extract(self, data: bytes) -> str:
        """Extract text from every page, pages separated by newlines.

        Raises:
            ExtractError: bytes are not a readable PDF
        """
        if not data:
            raise ExtractError("Source document is empty")
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as e:
            raise ExtractError(f"Could not extract text from PDF: {e}") from e

        logger.debug("Extracted PDF text", extra={"page_count": len(pages)})
        return "\n".join(pages)
