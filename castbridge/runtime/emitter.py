# castbridge/runtime/emitter.py
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from castbridge.interfaces.event_sink import BridgeEvent, EventSink


class EventEmitter:
    """
    Fan-out of bridge events to every subscribed sink.

    Emission may happen on any thread (receiver callbacks, request
    completions); sink failures are logged and never reach the emitter.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._sinks: List[EventSink] = []

    def subscribe(self, sink: EventSink) -> Callable[[], None]:
        with self._lock:
            if sink not in self._sinks:
                self._sinks.append(sink)

        def _unsubscribe() -> None:
            self.unsubscribe(sink)

        return _unsubscribe

    def unsubscribe(self, sink: EventSink) -> None:
        with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    @property
    def sinks(self) -> List[EventSink]:
        with self._lock:
            return list(self._sinks)

    def emit(self, name: str, arguments: Any = None) -> BridgeEvent:
        event = BridgeEvent(
            name=name,
            arguments=arguments,
            ts_utc=datetime.now(timezone.utc).isoformat(),
        )
        self._log.debug("EVENT name=%s arguments=%r", name, arguments)

        for sink in self.sinks:
            try:
                sink.on_event(event)
            except Exception:
                self._log.exception("EVENT_SINK_ERROR name=%s", name)
        return event
