from __future__ import annotations

import logging

from castbridge.app.config import BridgeConfig
from castbridge.app.controller import CastBridgeController


def _controller(provider, **kw):
    return CastBridgeController(BridgeConfig(device_name="TV", **kw), provider=provider, logger=logging.getLogger("test"))


def test_sinks_receive_events(provider, sink):
    ctrl = _controller(provider)
    ctrl.add_sink(sink)
    ctrl.add_sink(sink)

    ctrl.dispatch("addSessionListener")
    assert sink.pairs == [("didStartSession", None)]

    ctrl.remove_sink(sink)
    ctrl.dispatch("endSession")
    assert sink.pairs == [("didStartSession", None)]


def test_submit_returns_request_future(provider, client):
    ctrl = _controller(provider)
    ack = ctrl.submit("play")
    client.complete()
    assert ack.request.wait(0)["status"] == "ok"


def test_config_content_type_reaches_dispatcher(provider, client):
    ctrl = _controller(provider, default_content_type="audio/mpeg")
    ctrl.dispatch("loadMedia", {"url": "http://x/a.mp3"})
    assert client.calls[0][1][0].media["contentType"] == "audio/mpeg"


def test_exit_removes_listener_and_closes_sinks(provider, sink):
    with _controller(provider) as ctrl:
        ctrl.add_sink(sink)
        ctrl.dispatch("addSessionListener")
        assert provider.listeners

    assert provider.listeners == []
    assert sink.closed
    assert ctrl.emitter.sinks == []


def test_sink_close_error_is_logged(provider, caplog):
    class BadSink:
        def on_event(self, event):
            return None

        def close(self):
            raise OSError("disk gone")

    ctrl = _controller(provider)
    ctrl.add_sink(BadSink())
    with caplog.at_level(logging.ERROR, logger="test"):
        ctrl.stop()
    assert "SINK_CLOSE_ERROR" in caplog.text
