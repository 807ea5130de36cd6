# castbridge/core/recording/event_trace.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from castbridge.interfaces.event_sink import BridgeEvent, EventSink
from castbridge.core.recording.async_writer import AsyncWriter


@dataclass
class EventTraceLogger(EventSink):
    """Records every bridge event as one JSON line (and to `logger` at debug)."""
    logger: logging.Logger
    file_path: Optional[Path] = None
    flush_interval_s: float = 0.5

    def __post_init__(self) -> None:
        self._writer: Optional[AsyncWriter] = None
        if self.file_path is not None:
            self.file_path = Path(self.file_path)
            self._writer = AsyncWriter(
                path=self.file_path,
                flush_interval=self.flush_interval_s,
                logger=self.logger,
            )

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def on_event(self, event: BridgeEvent) -> None:
        self.logger.debug("TRACE event=%s arguments=%r", event.name, event.arguments)
        if self._writer is None:
            return

        out = {
            "event": event.name,
            "arguments": event.arguments,
            "ts_utc": event.ts_utc or datetime.now(timezone.utc).isoformat(),
        }
        out = {k: v for k, v in out.items() if v is not None}

        self._writer.write(json.dumps(out, ensure_ascii=False, default=str))
