"""LLM provider abstraction for chunk summarization."""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from congress_digest.errors import SummarizationFailure
from .prompts import CONGRESSIONAL_RECORD_PROMPT, PromptTemplate

if TYPE_CHECKING:
    from congress_digest.config import SummarizationSettings

logger = logging.getLogger(__name__)


@dataclass
class ProviderHealth:
    """Health status of an LLM provider."""

    healthy: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class SummaryProvider(ABC):
    """Abstract base class for chunk summary providers.

    ``summarize`` makes exactly one attempt. Retries, timeouts across
    attempts, and caching belong to the caller.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for identification."""
        pass

    @property
    def prompt(self) -> PromptTemplate:
        """Instruction template applied to every chunk."""
        return CONGRESSIONAL_RECORD_PROMPT

    @abstractmethod
    async def summarize(self, chunk_text: str) -> str:
        """Summarize one chunk of document text.

        Args:
            chunk_text: Chunk text

        Returns:
            Non-empty summary text

        Raises:
            SummarizationFailure: transport error, non-success status, or
                unusable response
        """
        pass

    @abstractmethod
    async def check_health(self) -> ProviderHealth:
        """Check if the provider is reachable."""
        pass


class ChatCompletionProvider(SummaryProvider):
    """HTTP provider for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
        timeout: float = 120.0,
        prompt: PromptTemplate = CONGRESSIONAL_RECORD_PROMPT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize chat completion provider.

        Args:
            base_url: API base URL (without ``/v1``)
            api_key: Optional bearer token
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Optional completion token cap
            timeout: Request timeout in seconds
            prompt: System instruction template
            client: Shared client; a short-lived one is opened per call if None
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._prompt = prompt
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: "SummarizationSettings",
        client: Optional[httpx.AsyncClient] = None,
    ) -> "ChatCompletionProvider":
        """Create provider from summarization settings."""
        api_key = settings.api_key.get_secret_value() if settings.api_key else None
        return cls(
            base_url=settings.api_base,
            api_key=api_key,
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.request_timeout,
            client=client,
        )

    @property
    def name(self) -> str:
        return f"chat:{self.model}"

    @property
    def prompt(self) -> PromptTemplate:
        return self._prompt

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(self, chunk_text: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": self._prompt.system},
                {"role": "user", "content": chunk_text},
            ],
        }
        if self.max_tokens:
            payload["max_tokens"] = self.max_tokens
        return payload

    async def _post(self, client: httpx.AsyncClient, chunk_text: str) -> httpx.Response:
        return await client.post(
            f"{self.base_url}/v1/chat/completions",
            headers=self._headers(),
            json=self._payload(chunk_text),
            timeout=self.timeout,
        )

    async def summarize(self, chunk_text: str) -> str:
        try:
            if self._client is not None:
                response = await self._post(self._client, chunk_text)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, chunk_text)
        except httpx.HTTPError as e:
            raise SummarizationFailure(f"Text generation request failed: {e}") from e

        if response.status_code >= 400:
            raise SummarizationFailure(
                f"Text generation returned HTTP {response.status_code}: "
                f"{_error_message(response)}",
                upstream_status=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise SummarizationFailure("Text generation returned malformed JSON") from e

        content = _first_choice_content(body)
        if content is None:
            raise SummarizationFailure("Text generation response has no choices")
        content = content.strip()
        if not content:
            raise SummarizationFailure("Text generation returned empty content")
        return content

    async def check_health(self) -> ProviderHealth:
        start = time.time()
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(
                    f"{self.base_url}/v1/models", headers=self._headers()
                )
            latency = (time.time() - start) * 1000
            return ProviderHealth(
                healthy=response.status_code == 200,
                latency_ms=latency,
                error=None if response.status_code == 200 else f"HTTP {response.status_code}",
            )
        except httpx.HTTPError as e:
            return ProviderHealth(healthy=False, error=str(e))


def _first_choice_content(body: Any) -> Optional[str]:
    """Pull ``choices[0].message.content`` out of a response body, if present."""
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", ""))
    return str(body)[:200]
