# castbridge/app/controller.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from castbridge.app.config import BridgeConfig
from castbridge.interfaces import CastButton, EventSink, SessionProvider
from castbridge.protocol.dispatcher import Acknowledgement, CommandDispatcher
from castbridge.runtime.emitter import EventEmitter
from castbridge.runtime.session_monitor import SessionMonitor


class CastBridgeController:
    """
    App-level wiring: session provider -> dispatcher -> emitter -> sinks.
    """

    def __init__(
        self,
        config: BridgeConfig,
        *,
        provider: SessionProvider,
        button: Optional[CastButton] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._provider = provider
        self._log = logger or logging.getLogger(__name__)

        self._emitter = EventEmitter(logger=self._log)
        self._monitor = SessionMonitor(provider, self._emitter, logger=self._log)
        self._dispatcher = CommandDispatcher(
            provider,
            self._emitter,
            self._monitor,
            button=button,
            default_content_type=config.default_content_type,
            logger=self._log,
        )

        self._sinks: List[EventSink] = []
        self._unsubscribers: Dict[int, Callable[[], None]] = {}

    @property
    def config(self) -> BridgeConfig:
        return self._config

    @property
    def provider(self) -> SessionProvider:
        return self._provider

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    @property
    def emitter(self) -> EventEmitter:
        return self._emitter

    def add_sink(self, sink: EventSink) -> None:
        if sink in self._sinks:
            return
        self._sinks.append(sink)
        self._unsubscribers[id(sink)] = self._emitter.subscribe(sink)

    def remove_sink(self, sink: EventSink) -> None:
        if sink not in self._sinks:
            return
        self._sinks.remove(sink)
        unsubscribe = self._unsubscribers.pop(id(sink), None)
        if unsubscribe is not None:
            unsubscribe()

    def stop(self) -> None:
        try:
            self._monitor.remove_session_listener()
        except Exception:
            self._log.exception("SESSION_LISTENER_REMOVE_ERROR")

        for s in list(self._sinks):
            self.remove_sink(s)
            try:
                s.close()
            except Exception:
                self._log.exception("SINK_CLOSE_ERROR")

    def __enter__(self) -> "CastBridgeController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # passthrough ops
    def dispatch(self, name: str, arguments: Any = None) -> Any:
        return self._dispatcher.dispatch(name, arguments)

    def submit(self, name: str, arguments: Any = None) -> Acknowledgement:
        return self._dispatcher.submit(name, arguments)
