# castbridge/app/channel.py
"""
JSON-lines host channel.

One request per input line:
  {"id": 1, "method": "seek", "arguments": {"interval": 10.0, "relative": true}}
answered with the immediate acknowledgement:
  {"id": 1, "result": null}
Events are pushed on the same stream whenever they happen:
  {"event": "didPlayerStatusUpdated", "arguments": 1}
"""

from __future__ import annotations

import json
import logging
import threading
from typing import IO, Any, Dict, Optional

from castbridge.interfaces import BridgeEvent, EventSink
from castbridge.protocol.dispatcher import CommandDispatcher

QUIT_METHOD = "quit"


class JsonLineChannel(EventSink):
    def __init__(
        self,
        dispatcher: CommandDispatcher,
        *,
        reader: IO[str],
        writer: IO[str],
        logger: Optional[logging.Logger] = None,
    ):
        self._dispatcher = dispatcher
        self._reader = reader
        self._writer = writer
        self._log = logger or logging.getLogger(__name__)
        self._write_lock = threading.Lock()
        self._closed = False

    # ---------------- EventSink ----------------
    def on_event(self, event: BridgeEvent) -> None:
        self._write({"event": event.name, "arguments": event.arguments})

    def close(self) -> None:
        with self._write_lock:
            self._closed = True

    # ---------------- loop ----------------
    def serve(self) -> int:
        """Handle requests until EOF or a quit request. Returns the number handled."""
        handled = 0
        for line in self._reader:
            line = line.strip()
            if not line:
                continue

            try:
                request = json.loads(line)
            except json.JSONDecodeError as e:
                self._log.warning("CHANNEL_BAD_JSON err=%s", e)
                self._write({"id": None, "error": f"Invalid JSON: {e}"})
                continue

            if not isinstance(request, dict) or not isinstance(request.get("method"), str):
                self._write({"id": _request_id(request), "error": "Request needs a 'method' string."})
                continue

            method = request["method"]
            if method == QUIT_METHOD:
                self._write({"id": request.get("id"), "result": None})
                break

            result = self._dispatcher.dispatch(method, request.get("arguments"))
            self._write({"id": request.get("id"), "result": result})
            handled += 1

        self._log.info("CHANNEL_CLOSED handled=%d", handled)
        return handled

    def _write(self, message: Dict[str, Any]) -> None:
        line = json.dumps(message, default=str)
        with self._write_lock:
            if self._closed:
                return
            self._writer.write(line + "\n")
            self._writer.flush()


def _request_id(request: Any) -> Any:
    return request.get("id") if isinstance(request, dict) else None
