# castbridge/runtime/chromecast.py
"""
pychromecast-backed session provider.

Maps a Chromecast's socket connection onto the bridge's session lifecycle
and its media controller onto RemoteMediaClient. All media requests go out
as non-blocking Cast media messages; their outcome comes back through the
request callback on pychromecast's socket thread.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pychromecast
from pychromecast.const import MESSAGE_TYPE
from pychromecast.controllers.media import (
    TYPE_EDIT_TRACKS_INFO,
    TYPE_LOAD,
    TYPE_PAUSE,
    TYPE_PLAY,
    TYPE_SEEK,
    TYPE_SET_PLAYBACK_RATE,
    TYPE_STOP,
)
from pychromecast.socket_client import (
    CONNECTION_STATUS_CONNECTED,
    CONNECTION_STATUS_DISCONNECTED,
    CONNECTION_STATUS_LOST,
)

from castbridge.core.errors import DeviceConnectError, DeviceNotFoundError
from castbridge.interfaces.remote import MediaClientListener, RequestCallback, SessionListener
from castbridge.model.media import MediaLoadRequest
from castbridge.model.status import MediaStatusSnapshot

TYPE_SET_VOLUME = "SET_VOLUME"


def snapshot_from_status(status: Any) -> Optional[MediaStatusSnapshot]:
    """Build a MediaStatusSnapshot from a pychromecast MediaStatus."""
    if status is None:
        return None

    media_info: Optional[Dict[str, Any]] = None
    if status.content_id is not None:
        media_info = {
            "contentId": status.content_id,
            "contentType": status.content_type,
            "streamType": status.stream_type,
            "duration": status.duration,
            "metadata": dict(status.media_metadata or {}),
            "customData": status.media_custom_data,
            "tracks": list(status.subtitle_tracks or []),
        }

    position_s = status.adjusted_current_time or 0.0
    active_ids = tuple(
        i for i in (status.current_subtitle_tracks or [])
        if isinstance(i, int) and not isinstance(i, bool)
    )

    return MediaStatusSnapshot(
        player_state=status.player_state,
        idle_reason=status.idle_reason,
        stream_position_ms=int(position_s * 1000),
        playback_rate=float(status.playback_rate or 1.0),
        active_track_ids=active_ids,
        media_info=media_info,
    )


class ChromecastMediaClient:
    """RemoteMediaClient over a pychromecast MediaController."""

    def __init__(self, media_controller: Any, *, logger: Optional[logging.Logger] = None):
        self._mc = media_controller
        self._log = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._listeners: List[MediaClientListener] = []

        # pychromecast has no unregister; forward through a single registration
        self._mc.register_status_listener(self)

    # ---------------- status ----------------
    @property
    def media_status(self) -> Optional[MediaStatusSnapshot]:
        return snapshot_from_status(self._mc.status)

    @property
    def media_info(self) -> Optional[Mapping]:
        snapshot = self.media_status
        return snapshot.media_info if snapshot is not None else None

    def approximate_stream_position(self) -> int:
        snapshot = self.media_status
        return snapshot.stream_position_ms if snapshot is not None else 0

    # ---------------- requests ----------------
    def load(self, request: MediaLoadRequest, callback: RequestCallback) -> None:
        # same LOAD message play_media builds, but with load-options customData kept
        msg = {
            MESSAGE_TYPE: TYPE_LOAD,
            "media": dict(request.media),
            "autoplay": request.autoplay,
            "customData": dict(request.custom_data or {}),
        }
        self._mc.send_message(msg, inc_session_id=True, callback_function=callback)

    def play(self, callback: RequestCallback) -> None:
        self._send_media_command({MESSAGE_TYPE: TYPE_PLAY}, callback)

    def pause(self, callback: RequestCallback) -> None:
        self._send_media_command({MESSAGE_TYPE: TYPE_PAUSE}, callback)

    def stop(self, callback: RequestCallback) -> None:
        self._send_media_command({MESSAGE_TYPE: TYPE_STOP}, callback)

    def seek(self, position_ms: int, callback: RequestCallback) -> None:
        self._send_media_command(
            {MESSAGE_TYPE: TYPE_SEEK, "currentTime": position_ms / 1000.0},
            callback,
        )

    def set_stream_volume(self, volume: float, callback: RequestCallback) -> None:
        self._send_media_command(
            {MESSAGE_TYPE: TYPE_SET_VOLUME, "volume": {"level": float(volume)}},
            callback,
        )

    def set_playback_rate(self, rate: float, callback: RequestCallback) -> None:
        self._send_media_command(
            {MESSAGE_TYPE: TYPE_SET_PLAYBACK_RATE, "playbackRate": float(rate)},
            callback,
        )

    def set_active_track_ids(self, track_ids: Sequence[int], callback: RequestCallback) -> None:
        self._send_media_command(
            {MESSAGE_TYPE: TYPE_EDIT_TRACKS_INFO, "activeTrackIds": [int(i) for i in track_ids]},
            callback,
        )

    def _send_media_command(self, command: Dict[str, Any], callback: RequestCallback) -> None:
        status = self._mc.status
        if status is None or status.media_session_id is None:
            self._log.warning("MEDIA_COMMAND_NO_SESSION type=%s", command[MESSAGE_TYPE])
            callback(False, {"type": "INVALID_REQUEST", "reason": "NO_MEDIA_SESSION"})
            return

        command["mediaSessionId"] = status.media_session_id
        self._mc.send_message(command, inc_session_id=True, callback_function=callback)

    # ---------------- listeners ----------------
    def register_listener(self, listener: MediaClientListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unregister_listener(self, listener: MediaClientListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # pychromecast MediaStatusListener
    def new_media_status(self, status: Any) -> None:
        snapshot = snapshot_from_status(status)
        for listener in self._snapshot_listeners():
            try:
                listener.on_status_updated(snapshot)
            except Exception:
                self._log.exception("MEDIA_LISTENER_ERROR")

    def load_media_failed(self, queue_item_id: int, error_code: int) -> None:
        self._log.warning("LOAD_MEDIA_FAILED item=%s code=%s", queue_item_id, error_code)
        for listener in self._snapshot_listeners():
            try:
                listener.on_media_error(error_code)
            except Exception:
                self._log.exception("MEDIA_LISTENER_ERROR")

    def _snapshot_listeners(self) -> List[MediaClientListener]:
        with self._lock:
            return list(self._listeners)


class ChromecastSession:
    """RemoteSession over a connected pychromecast Chromecast."""

    def __init__(self, cast: Any, media_client: ChromecastMediaClient):
        self._cast = cast
        self._media_client = media_client
        self.ended = False

    @property
    def is_connected(self) -> bool:
        return not self.ended and bool(getattr(self._cast.socket_client, "is_connected", False))

    @property
    def volume(self) -> float:
        status = self._cast.status
        return float(status.volume_level) if status is not None else 0.0

    @property
    def remote_media_client(self) -> Optional[ChromecastMediaClient]:
        return None if self.ended else self._media_client


class ChromecastSessionProvider:
    """
    SessionProvider for one Chromecast, found by friendly name.
    """

    def __init__(
        self,
        device_name: str,
        *,
        known_host: Optional[str] = None,
        discovery_timeout_s: float = 10.0,
        connect_timeout_s: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        self._device_name = device_name
        self._known_host = known_host
        self._discovery_timeout_s = float(discovery_timeout_s)
        self._connect_timeout_s = float(connect_timeout_s)
        self._log = logger or logging.getLogger(__name__)

        self._lock = threading.RLock()
        self._cast: Any = None
        self._browser: Any = None
        self._media_client: Optional[ChromecastMediaClient] = None
        self._session: Optional[ChromecastSession] = None
        self._listeners: List[SessionListener] = []

    # ---------------- lifecycle ----------------
    def connect(self) -> None:
        with self._lock:
            if self._cast is not None:
                return

        self._log.info("CHROMECAST_LOOKUP name=%s host=%s", self._device_name, self._known_host)
        chromecasts, browser = pychromecast.get_listed_chromecasts(
            friendly_names=[self._device_name],
            known_hosts=[self._known_host] if self._known_host else None,
            discovery_timeout=self._discovery_timeout_s,
        )
        if not chromecasts:
            browser.stop_discovery()
            raise DeviceNotFoundError(
                f"Cast device '{self._device_name}' not found.",
                hint="Check the friendly name, or pass --host with the device IP.",
                details={"device_name": self._device_name, "host": self._known_host},
            )

        cast = chromecasts[0]
        with self._lock:
            self._cast = cast
            self._browser = browser
            self._media_client = ChromecastMediaClient(cast.media_controller, logger=self._log)

        cast.register_connection_listener(self)
        try:
            cast.wait(timeout=self._connect_timeout_s)
        except pychromecast.RequestTimeout as e:
            self.close()
            raise DeviceConnectError(
                f"Cast device '{self._device_name}' did not become ready.",
                hint=f"No answer within {self._connect_timeout_s}s.",
                details={"device_name": self._device_name},
            ) from e

        if cast.socket_client.is_connected:
            self._start_session()
        self._log.info("CHROMECAST_CONNECTED name=%s host=%s", self._device_name, cast.cast_info.host)

    def close(self) -> None:
        with self._lock:
            cast, browser = self._cast, self._browser
            self._cast = None
            self._browser = None
            self._media_client = None

        self._end_session(None)

        if cast is not None:
            try:
                cast.disconnect(timeout=self._connect_timeout_s)
            except Exception:
                self._log.exception("CHROMECAST_DISCONNECT_ERROR")
        if browser is not None:
            try:
                browser.stop_discovery()
            except Exception:
                self._log.exception("CHROMECAST_STOP_DISCOVERY_ERROR")

    # ---------------- SessionProvider ----------------
    @property
    def current_session(self) -> Optional[ChromecastSession]:
        with self._lock:
            session, cast = self._session, self._cast
        if session is not None or cast is None:
            return session

        # ended by the host while the socket stayed up: a new session starts on demand
        if getattr(cast.socket_client, "is_connected", False):
            self._start_session()
        with self._lock:
            return self._session

    def add_session_listener(self, listener: SessionListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_session_listener(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def end_current_session(self, stop_casting: bool = True) -> None:
        with self._lock:
            cast = self._cast
            session = self._session
        if session is None:
            return

        if stop_casting and cast is not None:
            cast.socket_client.receiver_controller.stop_app(
                callback_function=lambda ok, resp: self._log.info("STOP_APP ok=%s", ok)
            )
        self._end_session(None)

    # pychromecast ConnectionStatusListener
    def new_connection_status(self, status: Any) -> None:
        self._log.info("CONNECTION_STATUS status=%s", status.status)
        if status.status == CONNECTION_STATUS_CONNECTED:
            self._start_session()
        elif status.status in (CONNECTION_STATUS_DISCONNECTED, CONNECTION_STATUS_LOST):
            self._end_session(status.status)

    # ---------------- Internal ----------------
    def _start_session(self) -> None:
        with self._lock:
            if self._session is not None or self._cast is None or self._media_client is None:
                return
            session = ChromecastSession(self._cast, self._media_client)
            self._session = session
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener.on_session_started(session)
            except Exception:
                self._log.exception("SESSION_LISTENER_ERROR")

    def _end_session(self, error: Optional[str]) -> None:
        with self._lock:
            session = self._session
            self._session = None
            listeners = list(self._listeners)
        if session is None:
            return

        session.ended = True
        for listener in listeners:
            try:
                listener.on_session_ended(session, error)
            except Exception:
                self._log.exception("SESSION_LISTENER_ERROR")
