"""Tests for the SSE connection registry and broadcast fan-out."""

import asyncio
import json
import uuid
from dataclasses import dataclass

import pytest

from clubber.notifications import (
    MATCH_STATUS_CHANGED,
    MatchEvent,
    NotificationHub,
    QueueSink,
    format_sse,
    serialize_event,
)
from tests.conftest import FailingSink, RecordingSink


def decode_frame(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):-2])


class TestRegistry:
    def test_register_returns_unique_ids(self):
        hub = NotificationHub()
        ids = {hub.register(RecordingSink()) for _ in range(50)}
        assert len(ids) == 50
        assert hub.connection_count == 50

    def test_deregister_removes(self):
        hub = NotificationHub()
        cid = hub.register(RecordingSink())
        hub.deregister(cid)
        assert cid not in hub
        assert hub.connection_count == 0

    def test_deregister_unknown_is_noop(self):
        hub = NotificationHub()
        kept = hub.register(RecordingSink())
        hub.deregister("never-registered")
        hub.deregister(kept)
        hub.deregister(kept)
        assert hub.connection_count == 0

    def test_deregister_unknown_does_not_affect_others(self):
        hub = NotificationHub()
        a = hub.register(RecordingSink())
        b = hub.register(RecordingSink())
        hub.deregister(uuid.uuid4().hex)
        assert set(hub.connection_ids) == {a, b}


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_delivers_same_payload_to_all(self):
        hub = NotificationHub()
        sinks = [RecordingSink() for _ in range(3)]
        for sink in sinks:
            hub.register(sink)

        result = await hub.broadcast({"id": 7, "status": "Live"})

        assert result.delivered == 3
        assert result.dropped == 0
        frames = [s.chunks for s in sinks]
        assert frames[0] == frames[1] == frames[2] == ['data: {"id":7,"status":"Live"}\n\n']
        assert all(s.flushes == 1 for s in sinks)

    @pytest.mark.asyncio
    async def test_failing_sink_dropped_others_still_receive(self):
        hub = NotificationHub()
        good_a = RecordingSink()
        bad = FailingSink()
        good_b = RecordingSink()
        id_a = hub.register(good_a)
        id_bad = hub.register(bad)
        id_b = hub.register(good_b)

        result = await hub.broadcast({"status": "Live"})

        assert result.delivered == 2
        assert result.dropped == 1
        assert len(good_a.chunks) == 1
        assert len(good_b.chunks) == 1
        assert id_bad not in hub
        assert set(hub.connection_ids) == {id_a, id_b}
        assert bad.closed
        assert not good_a.closed and not good_b.closed

    @pytest.mark.asyncio
    async def test_failing_flush_counts_as_write_failure(self):
        class FlushFails(RecordingSink):
            async def flush(self):
                raise OSError("broken pipe")

        hub = NotificationHub()
        cid = hub.register(FlushFails())
        result = await hub.broadcast({"x": 1})
        assert result.dropped == 1
        assert cid not in hub

    @pytest.mark.asyncio
    async def test_dropped_connection_gets_no_further_writes(self):
        class FailsOnce(RecordingSink):
            async def write(self, chunk):
                await super().write(chunk)
                raise RuntimeError("gone")

        hub = NotificationHub()
        sink = FailsOnce()
        hub.register(sink)
        await hub.broadcast({"n": 1})
        await hub.broadcast({"n": 2})
        assert len(sink.chunks) == 1

    @pytest.mark.asyncio
    async def test_no_connections(self):
        result = await NotificationHub().broadcast({"status": "Live"})
        assert (result.delivered, result.dropped) == (0, 0)

    @pytest.mark.asyncio
    async def test_deregister_during_broadcast_is_safe(self):
        hub = NotificationHub()
        late = RecordingSink()

        class Deregisters(RecordingSink):
            async def write(self, chunk):
                await super().write(chunk)
                hub.deregister(late_id)
                hub.register(RecordingSink())

        hub.register(Deregisters())
        late_id = hub.register(late)

        result = await hub.broadcast({"ok": True})

        # Snapshot semantics: the late connection may still get this one
        assert result.dropped == 0
        assert late_id not in hub

    @pytest.mark.asyncio
    async def test_concurrent_broadcasts(self):
        hub = NotificationHub()
        sinks = [RecordingSink() for _ in range(5)]
        for sink in sinks:
            hub.register(sink)

        await asyncio.gather(*(hub.broadcast({"n": n}) for n in range(10)))

        for sink in sinks:
            assert sorted(decode_frame(c)["n"] for c in sink.chunks) == list(range(10))

    @pytest.mark.asyncio
    async def test_match_event_payload(self):
        hub = NotificationHub()
        sink = RecordingSink()
        hub.register(sink)
        match_id = uuid.uuid4()

        await hub.broadcast(MatchEvent(
            type=MATCH_STATUS_CHANGED,
            match_id=match_id,
            status="Live",
            previous_status="Upcoming",
        ))

        payload = decode_frame(sink.chunks[0])
        assert payload["type"] == "match_status_changed"
        assert payload["matchId"] == str(match_id)
        assert payload["status"] == "Live"
        assert payload["previousStatus"] == "Upcoming"
        assert "timestamp" in payload

    @pytest.mark.asyncio
    async def test_unicode_line_separator_stays_in_one_frame(self):
        hub = NotificationHub()
        sink = RecordingSink()
        hub.register(sink)

        await hub.broadcast(MatchEvent(
            type=MATCH_STATUS_CHANGED,
            match_id=uuid.uuid4(),
            title="Reds\u2028Blues\u0085Final",
        ))

        frame = sink.chunks[0]
        assert frame.count("data: ") == 1
        assert decode_frame(frame)["title"] == "Reds\u2028Blues\u0085Final"


class TestWaitUntilClosed:
    @pytest.mark.asyncio
    async def test_deregisters_when_signalled(self):
        hub = NotificationHub()
        cid = hub.register(RecordingSink())
        closed = asyncio.Event()
        waiter = asyncio.create_task(hub.wait_until_closed(cid, closed))

        await asyncio.sleep(0)
        assert cid in hub
        assert not waiter.done()

        closed.set()
        await asyncio.wait_for(waiter, timeout=1)
        assert cid not in hub

    @pytest.mark.asyncio
    async def test_parked_connection_does_not_block_others(self):
        hub = NotificationHub()
        parked_sink = RecordingSink()
        parked = hub.register(parked_sink)
        closed = asyncio.Event()
        waiter = asyncio.create_task(hub.wait_until_closed(parked, closed))
        await asyncio.sleep(0)

        other = hub.register(RecordingSink())
        await hub.broadcast({"x": 1})
        hub.deregister(other)

        assert len(parked_sink.chunks) == 1
        closed.set()
        await waiter
        assert hub.connection_count == 0

    @pytest.mark.asyncio
    async def test_cancellation_also_deregisters(self):
        hub = NotificationHub()
        cid = hub.register(RecordingSink())
        waiter = asyncio.create_task(hub.wait_until_closed(cid, asyncio.Event()))
        await asyncio.sleep(0)

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert cid not in hub


class TestClose:
    @pytest.mark.asyncio
    async def test_close_cancels_parked_waiters(self):
        hub = NotificationHub()
        cid = hub.register(RecordingSink())
        waiter = asyncio.create_task(hub.wait_until_closed(cid, asyncio.Event()))
        await asyncio.sleep(0)

        hub.close()

        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert hub.connection_count == 0

    @pytest.mark.asyncio
    async def test_close_ends_queue_streams(self):
        hub = NotificationHub()
        sink = QueueSink()
        hub.register(sink)
        hub.register(RecordingSink())

        hub.close()

        assert hub.connection_count == 0
        assert sink.closed
        chunks = [c async for c in sink.stream(keepalive_seconds=1)]
        assert chunks == []


class TestSerialization:
    def test_format_sse(self):
        assert format_sse('{"a":1}') == 'data: {"a":1}\n\n'

    def test_format_sse_multiline(self):
        assert format_sse("a\nb") == "data: a\ndata: b\n\n"
        assert format_sse("a\u2029b\x1c") == "data: a\u2029b\x1c\n\n"

    def test_dataclass_event(self):
        @dataclass
        class Score:
            home: int
            away: int

        assert serialize_event(Score(2, 1)) == '{"home":2,"away":1}'

    def test_non_json_types_stringified(self):
        match_id = uuid.uuid4()
        assert json.loads(serialize_event({"id": match_id})) == {"id": str(match_id)}
