from __future__ import annotations

import pytest

from congress_digest import (
    AmbiguousIssue,
    CacheError,
    ExtractError,
    FeedError,
    FetchError,
    RunState,
    SummarizationCancelled,
    SummarizationFailure,
    status_for_kind,
)


@pytest.mark.parametrize(
    "error, kind, status",
    [
        (FetchError("x", url="https://x", status=404), "fetch_error", 502),
        (ExtractError("x"), "extract_error", 422),
        (SummarizationFailure("x", upstream_status=500, chunk_index=2), "summarization_failure", 502),
        (CacheError("x"), "cache_error", 503),
        (FeedError("x"), "feed_error", 502),
        (SummarizationCancelled("x"), "cancelled", 409),
        (AmbiguousIssue("x"), "ambiguous_issue", 422),
    ],
)
def test_each_kind_has_distinct_wire_shape(error, kind, status):
    assert error.kind == kind
    assert error.status_code == status
    assert error.to_dict() == {"error": "x", "kind": kind}
    assert status_for_kind(kind) == status


def test_unknown_kind_is_a_server_error():
    assert status_for_kind("internal_error") == 500


def test_terminal_states():
    assert {s for s in RunState if s.is_terminal()} == {
        RunState.DONE,
        RunState.FAILED,
        RunState.CANCELLED,
    }
