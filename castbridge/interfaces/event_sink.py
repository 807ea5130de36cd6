# castbridge/interfaces/event_sink.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

EVENT_SESSION_STARTED = "didStartSession"
EVENT_SESSION_ENDED = "didEndSession"
EVENT_PLAYER_STATUS_UPDATED = "didPlayerStatusUpdated"
EVENT_REQUEST_COMPLETED = "requestDidComplete"
EVENT_REQUEST_FAILED = "requestDidFail"


@dataclass(frozen=True, slots=True)
class BridgeEvent:
    """
    Asynchronous notification pushed to the host.
    Keep this small + stable; put details into arguments.
    """
    name: str                   # e.g. "didPlayerStatusUpdated"
    arguments: Any = None       # int status code, {"error": ...} or None
    ts_utc: Optional[str] = None


class EventSink(Protocol):
    def on_event(self, event: BridgeEvent) -> None: ...
    def close(self) -> None: ...
