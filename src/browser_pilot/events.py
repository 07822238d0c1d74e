"""
Event Stream

Ordered, append-only channel of typed progress records flowing from the
agent loop to the transport layer (HTTP stream or CLI).

Each record serializes to one NDJSON line: {"type": ..., "data": ...}
"""

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Kinds of records carried on the stream."""

    LOG = "log"
    RESPONSE = "response"
    ERROR = "error"
    SCREENSHOT = "screenshot"
    EXHAUSTED = "exhausted"


TERMINAL_EVENTS = frozenset({EventType.RESPONSE, EventType.ERROR, EventType.EXHAUSTED})


class StreamEvent(BaseModel):
    """A single typed record on the stream."""

    type: EventType
    data: str

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_ndjson(self) -> str:
        """Serialize as one newline-terminated JSON line."""
        return self.model_dump_json() + "\n"


# End-of-stream marker placed on the queue by close()
_END = object()


class EventSink:
    """
    Bounded async channel of StreamEvents.

    The producer awaits emit(), which applies backpressure when the consumer
    falls behind. The consumer iterates with ``async for`` until close().

    Usage:
        >>> sink = EventSink()
        >>> await sink.emit(EventType.LOG, "Navigating...")
        >>> await sink.close()
        >>> async for event in sink:
        ...     print(event.to_ndjson())
    """

    def __init__(self, maxsize: int = 100):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, event_type: EventType, data: str) -> StreamEvent:
        """
        Append an event to the stream.

        Args:
            event_type: Record type
            data: Record payload

        Returns:
            The emitted StreamEvent

        Raises:
            RuntimeError: If the sink was already closed
        """
        if self._closed:
            raise RuntimeError("Cannot emit on a closed event sink")

        event = StreamEvent(type=EventType(event_type), data=str(data))
        self._record(event)
        await self._queue.put(event)
        logger.debug("event %s: %s", event.type.value, event.data[:200])
        return event

    async def log(self, message: str) -> StreamEvent:
        """Shorthand for emitting a log record."""
        return await self.emit(EventType.LOG, message)

    async def close(self) -> None:
        """Signal end of stream. Calling close() twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_END)
        except asyncio.QueueFull:
            # Consumer stops once it drains what is left
            pass

    def _record(self, event: StreamEvent) -> None:
        """Hook for subclasses that keep a copy of emitted events."""

    async def __aiter__(self) -> AsyncIterator[StreamEvent]:
        while True:
            if self._closed and self._queue.empty():
                return
            item = await self._queue.get()
            if item is _END:
                return
            yield item


class RecordingSink(EventSink):
    """EventSink that also keeps every emitted event in ``events``."""

    def __init__(self, maxsize: int = 0):
        super().__init__(maxsize=maxsize)
        self.events: list[StreamEvent] = []

    def _record(self, event: StreamEvent) -> None:
        self.events.append(event)

    def types(self) -> list[EventType]:
        return [event.type for event in self.events]

    @property
    def last(self) -> Optional[StreamEvent]:
        return self.events[-1] if self.events else None
