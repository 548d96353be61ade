from __future__ import annotations

import asyncio
import json

import pytest

from congress_digest.summarization import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    ProgressChannel,
    StartEvent,
    to_ndjson,
)


def test_ndjson_uses_wire_field_names():
    line = to_ndjson(StartEvent(total_chunks=4))

    assert line.endswith("\n")
    assert line.count("\n") == 1
    assert json.loads(line) == {"event": "start", "totalChunks": 4}


def test_ndjson_event_shapes():
    assert json.loads(to_ndjson(ChunkEvent(index=1, content="x"))) == {
        "event": "chunk",
        "index": 1,
        "content": "x",
        "cached": False,
    }
    assert json.loads(to_ndjson(DoneEvent(summary="s", persisted=False))) == {
        "event": "done",
        "summary": "s",
        "cached": False,
        "persisted": False,
    }
    assert json.loads(to_ndjson(ErrorEvent(error="boom", kind="fetch_error"))) == {
        "event": "error",
        "error": "boom",
        "kind": "fetch_error",
    }


def test_events_accept_wire_names():
    assert StartEvent.model_validate({"totalChunks": 2}).total_chunks == 2


@pytest.mark.asyncio
async def test_subscriber_receives_events_in_publish_order_until_terminal():
    channel = ProgressChannel()
    received = []

    async def consume():
        async for event in channel.subscribe():
            received.append(event)

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0)
    channel.publish(StartEvent(total_chunks=1))
    await asyncio.sleep(0)
    channel.publish(ChunkEvent(index=0, content="a"))
    channel.publish(DoneEvent(summary="a"))
    await asyncio.wait_for(consumer, timeout=1)

    assert [e.event for e in received] == ["start", "chunk", "done"]
    assert channel.closed
    assert channel.terminal_event == DoneEvent(summary="a")


@pytest.mark.asyncio
async def test_late_subscriber_gets_full_replay():
    channel = ProgressChannel()
    channel.publish(StartEvent(total_chunks=0))
    channel.publish(DoneEvent(summary=""))

    replay = [event async for event in channel.subscribe()]

    assert replay == list(channel.events)


def test_publishing_after_terminal_event_is_rejected():
    channel = ProgressChannel()
    channel.publish(ErrorEvent(error="x", kind="fetch_error"))

    with pytest.raises(RuntimeError):
        channel.publish(StartEvent(total_chunks=1))
