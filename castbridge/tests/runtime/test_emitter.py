from __future__ import annotations

import logging

from castbridge.runtime.emitter import EventEmitter


class ListSink:
    def __init__(self):
        self.events = []

    def on_event(self, event) -> None:
        self.events.append(event)

    def close(self) -> None:
        return None


def test_emit_fans_out_to_every_sink():
    em = EventEmitter(logger=logging.getLogger("test"))
    a, b = ListSink(), ListSink()
    em.subscribe(a)
    em.subscribe(b)

    ev = em.emit("didPlayerStatusUpdated", 3)

    assert ev.name == "didPlayerStatusUpdated"
    assert ev.arguments == 3
    assert ev.ts_utc is not None
    assert a.events == [ev] and b.events == [ev]


def test_subscribe_twice_delivers_once():
    em = EventEmitter()
    s = ListSink()
    em.subscribe(s)
    em.subscribe(s)
    em.emit("didStartSession")
    assert len(s.events) == 1


def test_unsubscribe_callable():
    em = EventEmitter()
    s = ListSink()
    unsubscribe = em.subscribe(s)
    unsubscribe()
    unsubscribe()  # idempotent
    em.emit("didEndSession")
    assert s.events == []
    assert em.sinks == []


def test_sink_error_does_not_stop_fan_out(caplog):
    em = EventEmitter(logger=logging.getLogger("test"))

    class Boom:
        def on_event(self, event):
            raise RuntimeError("sink failed")

        def close(self):
            return None

    good = ListSink()
    em.subscribe(Boom())
    em.subscribe(good)

    with caplog.at_level(logging.ERROR, logger="test"):
        em.emit("requestDidComplete")

    assert [e.name for e in good.events] == ["requestDidComplete"]
    assert "EVENT_SINK_ERROR" in caplog.text
