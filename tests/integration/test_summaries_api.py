"""End-to-end tests for the summarization endpoints."""

from __future__ import annotations

import json

import pytest

from congress_digest.storage import FeedRecord

pytestmark = pytest.mark.integration

PDF_URL = "https://www.congress.gov/171/crec/2025/01/16/CREC-2025-01-16.pdf"


def ndjson(response):
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


def summarize(client, **overrides):
    body = {"pdfUrl": PDF_URL, "issueNumber": "12", "volumeNumber": 171}
    body.update(overrides)
    return client.post("/summaries", json=body)


def test_streams_ndjson_progress(test_client):
    response = summarize(test_client)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")
    assert response.headers["cache-control"] == "no-cache"
    assert ndjson(response) == [
        {"event": "start", "totalChunks": 3},
        {"event": "chunk", "index": 0, "content": "S0", "cached": False},
        {"event": "chunk", "index": 1, "content": "S1", "cached": False},
        {"event": "chunk", "index": 2, "content": "S2", "cached": False},
        {"event": "done", "summary": "S0\n\nS1\n\nS2", "cached": False, "persisted": True},
    ]


def test_repeat_request_is_served_from_cache(test_client, provider, fetcher):
    summarize(test_client)
    response = summarize(test_client)

    assert ndjson(response) == [
        {"event": "done", "summary": "S0\n\nS1\n\nS2", "cached": True, "persisted": True}
    ]
    assert len(provider.calls) == 3
    assert fetcher.urls == [PDF_URL]


def test_non_streaming_returns_summary_json(test_client):
    response = summarize(test_client, stream=False, issueNumber=12)

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == "S0\n\nS1\n\nS2"
    assert body["documentKey"] == "171-12"
    assert body["chunkCount"] == 3


def test_max_words_override(test_client):
    response = summarize(test_client, stream=False, maxWords=5)

    assert response.json()["chunkCount"] == 2


def test_failure_before_first_event_is_a_json_error(test_client, fetcher):
    fetcher.fail = True

    response = summarize(test_client)

    assert response.status_code == 502
    assert response.headers["content-type"].startswith("application/json")
    assert response.json()["kind"] == "fetch_error"
    assert response.json()["error"]


def test_extract_failure_maps_to_422(test_client, extractor):
    extractor.fail = True

    response = summarize(test_client, stream=False)

    assert response.status_code == 422
    assert response.json()["kind"] == "extract_error"


def test_mid_stream_failure_ends_with_error_record(test_client, provider):
    provider.fail_on = {1}

    response = summarize(test_client)
    events = ndjson(response)

    assert response.status_code == 200
    assert [e["event"] for e in events] == ["start", "chunk", "error"]
    assert events[-1]["kind"] == "summarization_failure"


def test_non_streaming_chunk_failure(test_client, provider):
    provider.fail_on = {2}

    response = summarize(test_client, stream=False)

    assert response.status_code == 502
    assert response.json()["kind"] == "summarization_failure"


def test_retry_after_failure_resumes_from_failed_chunk(test_client, provider):
    provider.fail_on = {2}
    summarize(test_client)
    provider.fail_on = set()

    summarize(test_client)

    assert provider.called_chunks == [0, 1, 2, 2]


@pytest.mark.parametrize(
    "body",
    [
        {"issueNumber": "12"},
        {"pdfUrl": PDF_URL},
        {"pdfUrl": PDF_URL, "issueNumber": "  "},
        {"pdfUrl": PDF_URL, "issueNumber": "12", "maxWords": 0},
        {"pdfUrl": PDF_URL, "issueNumber": "12", "unexpected": True},
    ],
)
def test_invalid_requests_are_rejected(test_client, body):
    assert test_client.post("/summaries", json=body).status_code == 422


def test_summary_status(test_client):
    before = test_client.get("/summaries/171-12").json()
    summarize(test_client)
    after = test_client.get("/summaries/171-12").json()

    assert before == {"documentKey": "171-12", "hasSummary": False, "cachedChunks": 0, "inProgress": False}
    assert after == {"documentKey": "171-12", "hasSummary": True, "cachedChunks": 3, "inProgress": False}


def test_cancel_without_run_is_not_found(test_client):
    assert test_client.delete("/summaries/171-12/run").status_code == 404


def test_missing_volume_resolves_to_stored_record(test_client, record_store):
    record_store.store_new([FeedRecord(issue_number="12", volume_number="171", issue_date="2025-01-16")])

    response = test_client.post(
        "/summaries", json={"pdfUrl": PDF_URL, "issueNumber": "12", "stream": False}
    )

    assert response.json()["documentKey"] == "171-12"
    listed = test_client.get("/records").json()["data"]
    assert listed[0]["summary"] == "S0\n\nS1\n\nS2"
    search = test_client.post("/records/search", json={"filters": {"hasSummaryOnly": True}})
    assert search.json()["count"] == 1


def test_issue_in_several_volumes_needs_volume(test_client, record_store, provider):
    record_store.store_new([
        FeedRecord(issue_number="12", volume_number="170"),
        FeedRecord(issue_number="12", volume_number="171"),
    ])

    response = test_client.post("/summaries", json={"pdfUrl": PDF_URL, "issueNumber": "12"})

    assert response.status_code == 422
    assert response.json()["kind"] == "ambiguous_issue"
    assert provider.calls == []
