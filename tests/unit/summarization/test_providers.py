"""Tests for ChatCompletionProvider against a mocked HTTP transport."""

from __future__ import annotations

import json

import httpx
import pytest

from congress_digest.config import SummarizationSettings
from congress_digest.errors import SummarizationFailure
from congress_digest.summarization import (
    CONGRESSIONAL_RECORD_PROMPT,
    ChatCompletionProvider,
    PromptTemplate,
)


def provider_with(handler, **kwargs) -> ChatCompletionProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("api_key", "sk-test")
    return ChatCompletionProvider("https://llm.example.com/", client=client, **kwargs)


def completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


@pytest.mark.asyncio
async def test_sends_system_instruction_and_chunk_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return completion("  **Senate**\n\nSummary text.  ")

    provider = provider_with(handler, model="gpt-4o-mini", temperature=0.3, max_tokens=800)
    summary = await provider.summarize("chunk words")

    assert summary == "**Senate**\n\nSummary text."
    assert seen["url"] == "https://llm.example.com/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["temperature"] == 0.3
    assert seen["body"]["max_tokens"] == 800
    assert seen["body"]["messages"] == [
        {"role": "system", "content": CONGRESSIONAL_RECORD_PROMPT.system},
        {"role": "user", "content": "chunk words"},
    ]


@pytest.mark.asyncio
async def test_error_status_carries_upstream_status_and_message():
    def handler(request):
        return httpx.Response(429, json={"error": {"message": "Rate limit reached"}})

    with pytest.raises(SummarizationFailure) as exc_info:
        await provider_with(handler).summarize("x")

    assert exc_info.value.upstream_status == 429
    assert "Rate limit reached" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"id": "no-choices"}),
        httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
        httpx.Response(200, content=b"not json"),
    ],
)
async def test_unusable_response_is_a_summarization_failure(response):
    with pytest.raises(SummarizationFailure):
        await provider_with(lambda request: response).summarize("x")


@pytest.mark.asyncio
async def test_blank_content_is_rejected():
    with pytest.raises(SummarizationFailure, match="empty"):
        await provider_with(lambda request: completion("   ")).summarize("x")


@pytest.mark.asyncio
async def test_transport_error_is_a_summarization_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SummarizationFailure) as exc_info:
        await provider_with(handler).summarize("x")

    assert exc_info.value.upstream_status is None


@pytest.mark.asyncio
async def test_custom_prompt_template_is_sent():
    prompt = PromptTemplate(name="test", version="9", system="Be brief.")
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return completion("ok")

    provider = provider_with(handler, prompt=prompt)
    await provider.summarize("x")

    assert provider.prompt.fingerprint == "test@9"
    assert seen["body"]["messages"][0]["content"] == "Be brief."


def test_from_settings():
    settings = SummarizationSettings(
        api_base="http://localhost:8080",
        api_key="secret",
        model="local-model",
        request_timeout=30,
    )

    provider = ChatCompletionProvider.from_settings(settings)

    assert provider.base_url == "http://localhost:8080"
    assert provider.api_key == "secret"
    assert provider.name == "chat:local-model"
    assert provider.timeout == 30


def test_prompt_template_covers_required_instructions():
    system = CONGRESSIONAL_RECORD_PROMPT.system

    assert CONGRESSIONAL_RECORD_PROMPT.fingerprint == "congressional-record@2"
    assert "(D)" in system and "(R)" in system
    assert "Markdown" in system
    assert "5 to 7 sentences" in system
