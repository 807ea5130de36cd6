# castbridge/runtime/session_monitor.py
from __future__ import annotations

import logging
import threading
from typing import Optional

from castbridge.interfaces.event_sink import (
    EVENT_PLAYER_STATUS_UPDATED,
    EVENT_SESSION_ENDED,
    EVENT_SESSION_STARTED,
)
from castbridge.interfaces.remote import RemoteMediaClient, RemoteSession, SessionProvider
from castbridge.model.status import MediaStatusSnapshot, media_error_code, status_code
from castbridge.runtime.emitter import EventEmitter


class SessionMonitor:
    """
    Session-lifecycle and media-status listener.

    Registered with the session provider by add_session_listener(); turns
    receiver pushes into didStartSession / didEndSession /
    didPlayerStatusUpdated events.
    """

    def __init__(
        self,
        provider: SessionProvider,
        emitter: EventEmitter,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._provider = provider
        self._emitter = emitter
        self._log = logger or logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._registered = False
        self._media_client: Optional[RemoteMediaClient] = None
        self._session: Optional[RemoteSession] = None

    @property
    def registered(self) -> bool:
        with self._lock:
            return self._registered

    def add_session_listener(self) -> None:
        with self._lock:
            if self._registered:
                self._log.warning("SESSION_LISTENER_ALREADY_ADDED")
                return
            self._registered = True

        self._provider.add_session_listener(self)
        self._log.info("SESSION_LISTENER_ADDED")

        # late subscribers still get to know about an already running session
        session = self._provider.current_session
        if session is not None and session.is_connected:
            self.on_session_started(session)

    def remove_session_listener(self) -> None:
        with self._lock:
            if not self._registered:
                return
            self._registered = False

        self._provider.remove_session_listener(self)
        with self._lock:
            self._session = None
        self._detach_media_client()
        self._log.info("SESSION_LISTENER_REMOVED")

    # ---------------- SessionListener ----------------
    def on_session_started(self, session: RemoteSession) -> None:
        # a provider push and the late-subscriber check can both report the same session
        with self._lock:
            if self._session is session:
                return
            self._session = session

        self._log.info("SESSION_STARTED")
        self._attach_media_client(session.remote_media_client)
        self._emitter.emit(EVENT_SESSION_STARTED)

    def on_session_ended(self, session: RemoteSession, error: Optional[str] = None) -> None:
        with self._lock:
            if self._session is session:
                self._session = None
        if error:
            self._log.warning("SESSION_ENDED error=%s", error)
        else:
            self._log.info("SESSION_ENDED")
        self._detach_media_client()
        self._emitter.emit(EVENT_SESSION_ENDED)

    # ---------------- MediaClientListener ----------------
    def on_status_updated(self, status: Optional[MediaStatusSnapshot]) -> None:
        self._emitter.emit(EVENT_PLAYER_STATUS_UPDATED, int(status_code(status)))

    def on_media_error(self, error_code: Optional[int]) -> None:
        code = media_error_code(error_code)
        self._log.warning("MEDIA_ERROR code=%d", code)
        self._emitter.emit(EVENT_PLAYER_STATUS_UPDATED, code)

    # ---------------- Internal ----------------
    def _attach_media_client(self, client: Optional[RemoteMediaClient]) -> None:
        with self._lock:
            previous = self._media_client
            self._media_client = client
        if previous is client:
            return
        if previous is not None:
            previous.unregister_listener(self)
        if client is not None:
            client.register_listener(self)

    def _detach_media_client(self) -> None:
        with self._lock:
            client = self._media_client
            self._media_client = None
        if client is not None:
            client.unregister_listener(self)
