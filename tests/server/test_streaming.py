from __future__ import annotations

import json

import pytest

from archsync.contracts.events import MessagePayload, SyncErrorPayload, SyncEvent, SyncEventType
from archsync.server.streaming import EventStream, feed_stream, format_sse


def _started() -> SyncEvent:
    return SyncEvent(
        type=SyncEventType.OVERWRITE_STARTED,
        payload=MessagePayload(message="Deleting existing work items", timestamp="2024-05-01T12:00:00.000Z"),
    )


async def _collect(stream: EventStream) -> list[str]:
    return [frame async for frame in stream.frames()]


def _types(frames: list[str]) -> list[str]:
    return [json.loads(frame.split("data: ", 1)[1])["type"] for frame in frames]


def test_format_sse() -> None:
    assert format_sse(_started()) == (
        "event: overwrite:started\n"
        'data: {"type":"overwrite:started","data":'
        '{"timestamp":"2024-05-01T12:00:00.000Z","message":"Deleting existing work items"}}\n\n'
    )


@pytest.mark.asyncio
async def test_stream_ends_after_terminal_event() -> None:
    stream = EventStream()
    stream.emit(_started())
    stream.fail("boom")
    stream.emit(_started())
    stream.close()

    frames = await _collect(stream)

    assert _types(frames) == ["overwrite:started", "sync:error"]
    assert stream.finished


@pytest.mark.asyncio
async def test_close_without_terminal_event_synthesizes_error() -> None:
    stream = EventStream()
    stream.emit(_started())
    stream.close()

    frames = await _collect(stream)

    assert _types(frames) == ["overwrite:started", "sync:error"]
    assert "Sync ended without a result" in frames[-1]


@pytest.mark.asyncio
async def test_fail_after_terminal_is_ignored() -> None:
    stream = EventStream()
    stream.emit(SyncEvent(type=SyncEventType.SYNC_ERROR, payload=SyncErrorPayload(error="first")))
    stream.fail("second")
    stream.close()

    frames = await _collect(stream)

    assert len(frames) == 1
    assert '"error":"first"' in frames[0]


class TestFeedStream:
    @pytest.mark.asyncio
    async def test_escaped_error_becomes_sync_error(self) -> None:
        stream = EventStream()

        async def run() -> None:
            raise RuntimeError("token lookup failed")

        await feed_stream(stream, run())

        frames = await _collect(stream)
        assert _types(frames) == ["sync:error"]
        assert "token lookup failed" in frames[0]

    @pytest.mark.asyncio
    async def test_successful_run_closes_stream(self) -> None:
        stream = EventStream()

        async def run() -> None:
            stream.emit(_started())

        await feed_stream(stream, run())

        assert _types(await _collect(stream)) == ["overwrite:started", "sync:error"]
