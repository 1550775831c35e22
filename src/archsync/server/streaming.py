"""Server-sent-event bridge between the sync engine and an HTTP response."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable

from archsync.contracts.events import SyncErrorPayload, SyncEvent, SyncEventType
from archsync.engine.progress import SyncProgress

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_UNFINISHED_MESSAGE = "Sync ended without a result"


def format_sse(event: SyncEvent) -> str:
    """One SSE frame: ``event: <type>`` then ``data: {"type", "data"}``."""
    return f"event: {event.type.value}\ndata: {json.dumps(event.to_wire(), separators=(',', ':'))}\n\n"


class EventStream(SyncProgress):
    """Queues engine events until the response body pulls them.

    The stream ends after the first terminal event. If the producer closes
    the stream without one, a ``sync:error`` frame is synthesized so the
    client always sees exactly one terminal event.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[SyncEvent | None] = asyncio.Queue()
        self._terminal_sent = False

    @property
    def finished(self) -> bool:
        return self._terminal_sent

    def emit(self, event: SyncEvent) -> None:
        if self._terminal_sent:
            logger.debug("Dropping %s after terminal event", event.type.value)
            return
        if event.type.is_terminal:
            self._terminal_sent = True
        self._queue.put_nowait(event)

    def fail(self, error: str) -> None:
        """Emit ``sync:error`` unless a terminal event was already sent."""
        self.emit(SyncEvent(type=SyncEventType.SYNC_ERROR, payload=SyncErrorPayload(error=error)))

    def close(self) -> None:
        self._queue.put_nowait(None)

    async def frames(self) -> AsyncIterator[str]:
        while True:
            event = await self._queue.get()
            if event is None:
                break
            yield format_sse(event)
            if event.type.is_terminal:
                return
        yield format_sse(SyncEvent(type=SyncEventType.SYNC_ERROR, payload=SyncErrorPayload(error=_UNFINISHED_MESSAGE)))


async def feed_stream(stream: EventStream, run: Awaitable[object]) -> None:
    """Await *run* and close *stream*, turning an escaped error into ``sync:error``."""
    try:
        await run
    except Exception as exc:
        logger.error("Sync stream producer failed: %s", exc, exc_info=True)
        stream.fail(str(exc) or exc.__class__.__name__)
    finally:
        stream.close()
