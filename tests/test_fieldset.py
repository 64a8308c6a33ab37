"""
Tests for the field set websocket stream: event dispatch, the ignore list,
error isolation and the connection state machine.

Async code is driven with asyncio.run; aiohttp is replaced by in-memory fakes.
"""
import asyncio
import json
from datetime import datetime, timezone

import aiohttp
import pytest

from fieldset import fieldset as fieldset_module
from fieldset.fieldset import FieldsetStream, StreamState
from fieldset.utils import decode_event, is_ignored_match
from tmapi.tmapi import Session

SESSION = Session(credential="tok", expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc))


class FakeSessionManager:
    address = "tm.local"

    def __init__(self):
        self.calls = 0

    def ensure_valid(self):
        self.calls += 1
        return SESSION


class FakeMessage:
    def __init__(self, data, type=aiohttp.WSMsgType.TEXT):
        self.type = type
        self.data = data


class FakeWebSocket:
    def __init__(self, frames):
        self._frames = list(frames)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._frames:
            raise StopAsyncIteration
        return self._frames.pop(0)

    async def close(self):
        self.closed = True


class FakeClientSession:
    instances = []

    def __init__(self, frames):
        self.frames = frames
        self.connects = []
        self.closed = False
        FakeClientSession.instances.append(self)

    async def ws_connect(self, url, headers=None, heartbeat=None):
        self.connects.append({"url": url, "headers": headers})
        self.ws = FakeWebSocket(self.frames)
        return self.ws

    async def close(self):
        self.closed = True


class Recorder:
    def __init__(self):
        self.resolved = []
        self.queued = []
        self.started = 0

    def resolve(self, name):
        self.resolved.append(name)
        if name == "Q99":
            raise RuntimeError("boom")
        return {"match_num": name}

    def on_queued(self, record):
        self.queued.append(record)

    def on_started(self):
        self.started += 1


def frame(**event):
    return FakeMessage(json.dumps(event))


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def stream(recorder):
    stream = FieldsetStream(FakeSessionManager(), 1, recorder.resolve)
    stream._on_match_queued = recorder.on_queued
    stream._on_match_started = recorder.on_started
    return stream


@pytest.fixture
def fake_aiohttp(monkeypatch):
    """Patch aiohttp.ClientSession so connect() serves the given frames."""
    FakeClientSession.instances = []

    def install(frames):
        monkeypatch.setattr(fieldset_module.aiohttp, "ClientSession", lambda: FakeClientSession(frames))
        return FakeClientSession.instances

    return install


# =============================================================================
# Event helpers
# =============================================================================

@pytest.mark.parametrize("name", ["Unknown", "P0", "D Skills", "P Skills", None])
def test_ignored_match_names(name):
    assert is_ignored_match(name)


def test_real_match_not_ignored():
    assert not is_ignored_match("Q23")


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '"fieldMatchAssigned"'])
def test_decode_event_rejects_non_objects(text):
    assert decode_event(text) is None


# =============================================================================
# Dispatch
# =============================================================================

def test_ignored_match_produces_no_callback(stream, recorder):
    asyncio.run(stream.handle_event({"type": "fieldMatchAssigned", "name": "P0"}))
    assert recorder.queued == []
    assert recorder.resolved == []


def test_queued_match_is_resolved_and_delivered_once(stream, recorder):
    asyncio.run(stream.handle_event({"type": "fieldMatchAssigned", "name": "Q23"}))
    assert recorder.resolved == ["Q23"]
    assert recorder.queued == [{"match_num": "Q23"}]


def test_match_started_invokes_callback(stream, recorder):
    asyncio.run(stream.handle_event({"type": "matchStarted"}))
    assert recorder.started == 1


def test_unknown_event_types_are_ignored(stream, recorder):
    asyncio.run(stream.handle_event({"type": "displayUpdated", "name": "Q1"}))
    asyncio.run(stream.handle_event({"name": "Q1"}))
    assert recorder.resolved == []
    assert recorder.queued == []
    assert recorder.started == 0


def test_resolution_failure_is_contained(stream, recorder, caplog):
    asyncio.run(stream.handle_event({"type": "fieldMatchAssigned", "name": "Q99"}))
    assert recorder.queued == []
    assert "Failed to handle fieldMatchAssigned event" in caplog.text


def test_async_callbacks_are_awaited(recorder):
    delivered = []

    async def on_queued(record):
        await asyncio.sleep(0)
        delivered.append(record)

    stream = FieldsetStream(FakeSessionManager(), 1, recorder.resolve)
    stream._on_match_queued = on_queued
    asyncio.run(stream.handle_event({"type": "fieldMatchAssigned", "name": "Q5"}))
    assert delivered == [{"match_num": "Q5"}]


def test_no_resolution_without_queued_callback(recorder):
    stream = FieldsetStream(FakeSessionManager(), 1, recorder.resolve)
    asyncio.run(stream.handle_event({"type": "fieldMatchAssigned", "name": "Q5"}))
    assert recorder.resolved == []


# =============================================================================
# Connection
# =============================================================================

def test_url_uses_fieldset_id():
    stream = FieldsetStream(FakeSessionManager(), 3, lambda name: None)
    assert stream.url == "ws://tm.local/fieldsets/3"


def test_frames_processed_in_order(fake_aiohttp, recorder):
    sessions = fake_aiohttp([
        frame(type="fieldMatchAssigned", name="P0"),
        frame(type="fieldMatchAssigned", name="Q99"),
        frame(type="fieldMatchAssigned", name="Q23"),
        FakeMessage("garbage"),
        frame(type="timerUpdated"),
        frame(type="matchStarted"),
        FakeMessage(b"\x00", type=aiohttp.WSMsgType.BINARY),
    ])

    async def scenario():
        stream = FieldsetStream(FakeSessionManager(), 1, recorder.resolve)
        await stream.on_match_queued(recorder.on_queued)
        await stream.on_match_started(recorder.on_started)
        await stream.wait_closed()
        return stream

    stream = asyncio.run(scenario())

    assert recorder.resolved == ["Q99", "Q23"]
    assert recorder.queued == [{"match_num": "Q23"}]
    assert recorder.started == 1
    assert stream.state is StreamState.DISCONNECTED
    assert len(sessions) == 1
    assert sessions[0].connects[0] == {
        "url": "ws://tm.local/fieldsets/1",
        "headers": {"Cookie": 'user="tok"'},
    }
    assert sessions[0].closed


def test_connect_is_noop_while_connected(fake_aiohttp):
    sessions = fake_aiohttp([])
    manager = FakeSessionManager()
    stream = FieldsetStream(manager, 1, lambda name: None)
    stream.state = StreamState.CONNECTED

    asyncio.run(stream.connect())

    assert sessions == []
    assert manager.calls == 0


class IdleWebSocket(FakeWebSocket):
    """A socket that stays open until the reader is cancelled."""

    async def __anext__(self):
        await asyncio.Event().wait()


class IdleClientSession(FakeClientSession):
    async def ws_connect(self, url, headers=None, heartbeat=None):
        self.connects.append({"url": url, "headers": headers})
        self.ws = IdleWebSocket([])
        return self.ws


def test_registration_connects_only_once(monkeypatch, recorder):
    FakeClientSession.instances = []
    monkeypatch.setattr(fieldset_module.aiohttp, "ClientSession", lambda: IdleClientSession([]))
    manager = FakeSessionManager()

    async def scenario():
        stream = FieldsetStream(manager, 1, recorder.resolve)
        await stream.on_match_queued(recorder.on_queued)
        await asyncio.sleep(0)
        state_after_first = stream.state
        await stream.on_match_started(recorder.on_started)
        await stream.close()
        return state_after_first, stream.state

    state_after_first, final_state = asyncio.run(scenario())

    assert state_after_first is StreamState.CONNECTED
    assert final_state is StreamState.DISCONNECTED
    assert len(FakeClientSession.instances) == 1
    assert manager.calls == 1
    assert FakeClientSession.instances[0].ws.closed


def test_failed_handshake_returns_to_disconnected(monkeypatch):
    class RefusingSession(FakeClientSession):
        async def ws_connect(self, url, headers=None, heartbeat=None):
            raise aiohttp.ClientConnectionError("refused")

    monkeypatch.setattr(fieldset_module.aiohttp, "ClientSession", lambda: RefusingSession([]))
    stream = FieldsetStream(FakeSessionManager(), 1, lambda name: None)

    with pytest.raises(aiohttp.ClientConnectionError):
        asyncio.run(stream.connect())
    assert stream.state is StreamState.DISCONNECTED
