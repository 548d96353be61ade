"""Progress events and the ordered channel that carries them.

A summarization run publishes, in order: one ``StartEvent`` with the chunk
count, one ``ChunkEvent`` per chunk in ascending index order, then exactly
one terminal event (``DoneEvent`` or ``ErrorEvent``). A cache hit on the
whole document publishes only the ``DoneEvent``.
"""
from __future__ import annotations

import asyncio
from typing import AsyncIterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class StartEvent(_Event):
    event: Literal["start"] = "start"
    total_chunks: int = Field(alias="totalChunks", ge=0)


class ChunkEvent(_Event):
    event: Literal["chunk"] = "chunk"
    index: int = Field(ge=0)
    content: str
    cached: bool = False


class DoneEvent(_Event):
    event: Literal["done"] = "done"
    summary: str
    cached: bool = False
    # False when the summary could not be written to the Document Cache
    persisted: bool = True


class ErrorEvent(_Event):
    event: Literal["error"] = "error"
    error: str
    kind: str


ProgressEvent = Union[StartEvent, ChunkEvent, DoneEvent, ErrorEvent]
TERMINAL_EVENTS = (DoneEvent, ErrorEvent)


def to_ndjson(event: ProgressEvent) -> str:
    """Serialize one event as a single newline-terminated JSON line."""
    return event.model_dump_json(by_alias=True) + "\n"


class ProgressChannel:
    """Append-only, ordered event log with replay.

    Any number of subscribers may attach at any time; each receives every
    event from the first one onward, in publish order, and stops after the
    terminal event.
    """

    def __init__(self) -> None:
        self._events: List[ProgressEvent] = []
        self._closed = False
        self._changed = asyncio.Event()

    @property
    def events(self) -> Tuple[ProgressEvent, ...]:
        return tuple(self._events)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def terminal_event(self) -> Optional[ProgressEvent]:
        if self._events and isinstance(self._events[-1], TERMINAL_EVENTS):
            return self._events[-1]
        return None

    def publish(self, event: ProgressEvent) -> None:
        if self._closed:
            raise RuntimeError("Cannot publish to a closed progress channel")
        self._events.append(event)
        if isinstance(event, TERMINAL_EVENTS):
            self._closed = True
        self._wake()

    def _wake(self) -> None:
        waiter, self._changed = self._changed, asyncio.Event()
        waiter.set()

    async def subscribe(self) -> AsyncIterator[ProgressEvent]:
        position = 0
        while True:
            while position < len(self._events):
                yield self._events[position]
                position += 1
            if self._closed:
                return
            await self._changed.wait()
