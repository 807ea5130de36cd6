# castbridge/protocol/_internal/pending_request.py
from __future__ import annotations

import threading
import time
from concurrent.futures import Future, InvalidStateError
from typing import Any, Callable, Mapping, Optional


def describe_failure(response: Optional[Mapping]) -> str:
    """Human readable reason for a failed receiver request."""
    if not response:
        return "request failed"
    if not isinstance(response, Mapping):
        return str(response)
    reason = response.get("reason") or response.get("detailedErrorCode")
    kind = response.get("type") or "ERROR"
    return f"{kind}: {reason}" if reason else str(kind)


class PendingRequest:
    """Holds a Future for one receiver request."""

    def __init__(self, request_id: int, command: str):
        self.request_id = int(request_id)
        self.command = str(command)
        self.created_at = time.perf_counter()
        self.future: Future = Future()
        self._lock = threading.Lock()

    def add_done_callback(self, cb: Callable[[Future], Any]) -> Any:
        """Forward callback registration to the underlying Future."""
        return self.future.add_done_callback(cb)

    def done(self) -> bool:
        return self.future.done()

    def callback(self, success: bool, response: Optional[Mapping] = None) -> None:
        """Completion hook handed to the remote media client."""
        if success:
            self.set_result("ok", response=response)
        else:
            self.set_result("fail", error=describe_failure(response))

    def set_result(
        self,
        status: str,
        *,
        response: Optional[Mapping] = None,
        error: Optional[str] = None,
    ) -> None:
        """Resolve this request (first result wins)."""
        if status == "ok":
            result = {"status": "ok", "response": response}
        else:
            result = {"status": status, "error": error or "request failed"}

        with self._lock:
            if self.future.done():
                return
            try:
                self.future.set_result(result)
            except InvalidStateError:
                # resolved elsewhere between the check and the set
                return

    def wait(self, timeout: Optional[float] = None) -> dict:
        """Blocking wait for request completion."""
        try:
            return self.future.result(timeout=timeout)
        except Exception:
            return {"status": "pending"}
