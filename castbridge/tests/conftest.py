from __future__ import annotations

import logging
from typing import Any, List, Optional

import pytest

from castbridge.model.status import MediaStatusSnapshot
from castbridge.protocol.dispatcher import CommandDispatcher
from castbridge.runtime.emitter import EventEmitter
from castbridge.runtime.session_monitor import SessionMonitor


class FakeMediaClient:
    """
    RemoteMediaClient stub:
    - request methods record (name, args, callback) and never answer on their own
    - complete()/fail() answer the most recent request
    """
    def __init__(self, *, status: Optional[MediaStatusSnapshot] = None, media_info=None, position_ms: int = 0):
        self.media_status = status
        self.media_info = media_info
        self.position_ms = position_ms
        self.calls: List[tuple] = []
        self.listeners: List[Any] = []
        self.raise_on_send: Optional[Exception] = None

    def approximate_stream_position(self) -> int:
        return self.position_ms

    def _record(self, name: str, args: tuple, callback) -> None:
        if self.raise_on_send is not None:
            raise self.raise_on_send
        self.calls.append((name, args, callback))

    def load(self, request, callback) -> None:
        self._record("load", (request,), callback)

    def play(self, callback) -> None:
        self._record("play", (), callback)

    def pause(self, callback) -> None:
        self._record("pause", (), callback)

    def stop(self, callback) -> None:
        self._record("stop", (), callback)

    def seek(self, position_ms, callback) -> None:
        self._record("seek", (position_ms,), callback)

    def set_stream_volume(self, volume, callback) -> None:
        self._record("set_stream_volume", (volume,), callback)

    def set_playback_rate(self, rate, callback) -> None:
        self._record("set_playback_rate", (rate,), callback)

    def set_active_track_ids(self, track_ids, callback) -> None:
        self._record("set_active_track_ids", (list(track_ids),), callback)

    def register_listener(self, listener) -> None:
        if listener not in self.listeners:
            self.listeners.append(listener)

    def unregister_listener(self, listener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    # test helpers
    def complete(self, response=None) -> None:
        self.calls[-1][2](True, response)

    def fail(self, response=None) -> None:
        self.calls[-1][2](False, response)

    @property
    def names(self) -> List[str]:
        return [c[0] for c in self.calls]


class FakeSession:
    def __init__(self, client: Optional[FakeMediaClient] = None, *, connected: bool = True, volume: float = 0.5):
        self.remote_media_client = client
        self.is_connected = connected
        self.volume = volume


class FakeProvider:
    def __init__(self, session: Optional[FakeSession] = None):
        self.current_session = session
        self.listeners: List[Any] = []
        self.end_calls: List[bool] = []

    def add_session_listener(self, listener) -> None:
        self.listeners.append(listener)

    def remove_session_listener(self, listener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def end_current_session(self, stop_casting: bool = True) -> None:
        self.end_calls.append(stop_casting)
        session = self.current_session
        self.current_session = None
        if session is not None:
            for listener in list(self.listeners):
                listener.on_session_ended(session, None)


class RecordingSink:
    def __init__(self):
        self.events = []
        self.closed = False

    def on_event(self, event) -> None:
        self.events.append(event)

    def close(self) -> None:
        self.closed = True

    @property
    def pairs(self) -> List[tuple]:
        return [(e.name, e.arguments) for e in self.events]


@pytest.fixture
def client() -> FakeMediaClient:
    return FakeMediaClient()


@pytest.fixture
def session(client) -> FakeSession:
    return FakeSession(client)


@pytest.fixture
def provider(session) -> FakeProvider:
    return FakeProvider(session)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def emitter(sink) -> EventEmitter:
    em = EventEmitter(logger=logging.getLogger("test"))
    em.subscribe(sink)
    return em


@pytest.fixture
def monitor(provider, emitter) -> SessionMonitor:
    return SessionMonitor(provider, emitter, logger=logging.getLogger("test"))


@pytest.fixture
def dispatcher(provider, emitter, monitor) -> CommandDispatcher:
    return CommandDispatcher(provider, emitter, monitor, logger=logging.getLogger("test"))
