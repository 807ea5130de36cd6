# castbridge/protocol/dispatcher.py
from __future__ import annotations

import itertools
import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from castbridge.interfaces.event_sink import EVENT_REQUEST_COMPLETED, EVENT_REQUEST_FAILED
from castbridge.interfaces.remote import (
    CastButton,
    RemoteMediaClient,
    RemoteSession,
    RequestCallback,
    SessionProvider,
)
from castbridge.model.media import DEFAULT_CONTENT_TYPE, MediaDescriptor, decode, duration_ms, encode
from castbridge.model.tracks import TrackCategory, active_language, parse_tracks, select_track
from castbridge.runtime.emitter import EventEmitter
from castbridge.runtime.session_monitor import SessionMonitor

from .commands import read_arguments
from ._internal.pending_request import PendingRequest


@dataclass(frozen=True)
class Acknowledgement:
    """Immediate answer to a command; `request` is set when a receiver request went out."""
    value: Any = None
    request: Optional[PendingRequest] = None


RequestHandler = Callable[[RemoteMediaClient, Dict[str, Any]], Optional[PendingRequest]]
QueryHandler = Callable[[Optional[RemoteSession]], Any]


class CommandDispatcher:
    """
    Routes named host commands to the current receiver session.

    Every command is acknowledged immediately. Receiver requests report
    their outcome later as requestDidComplete / requestDidFail events.
    """

    def __init__(
        self,
        provider: SessionProvider,
        emitter: EventEmitter,
        monitor: SessionMonitor,
        *,
        button: Optional[CastButton] = None,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
        logger: Optional[logging.Logger] = None,
    ):
        self._provider = provider
        self._emitter = emitter
        self._monitor = monitor
        self._button = button
        self._default_content_type = default_content_type
        self._log = logger or logging.getLogger(__name__)

        self._ids = itertools.count(1)

        self._requests: Dict[str, RequestHandler] = {
            "loadMedia": self._load_media,
            "play": lambda client, _args: self._issue("play", client.play),
            "pause": lambda client, _args: self._issue("pause", client.pause),
            "stop": lambda client, _args: self._issue("stop", client.stop),
            "seek": self._seek,
            "setVolume": self._set_volume,
            "setPlaybackRate": self._set_playback_rate,
            "setAudioTrack": self._set_audio_track,
            "setSubtitleTrack": self._set_subtitle_track,
        }
        self._queries: Dict[str, QueryHandler] = {
            "isPlaying": self._is_playing,
            "isConnected": lambda session: bool(session is not None and session.is_connected),
            "position": self._position,
            "duration": self._duration,
            "getMediaInfo": self._get_media_info,
            "getVolume": self._get_volume,
            "getPlaybackRate": self._get_playback_rate,
            "getAudioTrack": lambda session: self._active_language(session, TrackCategory.AUDIO),
            "getSubtitleTrack": lambda session: self._active_language(session, TrackCategory.SUBTITLE),
        }
        self._actions: Dict[str, Callable[[], None]] = {
            "wait": lambda: None,
            "endSession": lambda: self._provider.end_current_session(True),
            "addSessionListener": self._monitor.add_session_listener,
            "removeSessionListener": self._monitor.remove_session_listener,
            "performClick": self._perform_click,
        }

    @property
    def commands(self) -> list[str]:
        return sorted([*self._requests, *self._queries, *self._actions])

    # ---------------- Command API ----------------
    def dispatch(self, name: str, arguments: Any = None) -> Any:
        return self.submit(name, arguments).value

    def submit(self, name: str, arguments: Any = None) -> Acknowledgement:
        self._log.debug("CMD name=%s", name)
        try:
            return self._route(name, arguments)
        except Exception:
            self._log.exception("CMD_FAILED name=%s", name)
            return Acknowledgement()

    def _route(self, name: str, arguments: Any) -> Acknowledgement:
        if name in self._requests:
            args = read_arguments(name, arguments)
            client = self._client_of(self._provider.current_session)
            if client is None:
                self._log.debug("CMD_SKIPPED_NO_CLIENT name=%s", name)
                return Acknowledgement()
            return Acknowledgement(request=self._requests[name](client, args))

        if name in self._queries:
            return Acknowledgement(value=self._queries[name](self._provider.current_session))

        if name in self._actions:
            self._actions[name]()
            return Acknowledgement()

        self._log.debug("CMD_UNKNOWN name=%s", name)
        return Acknowledgement()

    # ---------------- Requests ----------------
    def _issue(self, command: str, send: Callable[[RequestCallback], None]) -> PendingRequest:
        pending = PendingRequest(next(self._ids), command)
        pending.add_done_callback(lambda fut: self._on_request_done(pending, fut))

        try:
            send(pending.callback)
        except Exception as e:
            self._log.exception("REQUEST_SEND_FAILED cmd=%s id=%d", command, pending.request_id)
            pending.set_result("fail", error=str(e) or type(e).__name__)

        return pending

    def _on_request_done(self, pending: PendingRequest, fut: Future) -> None:
        result = fut.result()
        if result.get("status") == "ok":
            self._log.debug("REQUEST_OK cmd=%s id=%d", pending.command, pending.request_id)
            self._emitter.emit(EVENT_REQUEST_COMPLETED)
            return

        error = result.get("error")
        self._log.info("REQUEST_FAILED cmd=%s id=%d error=%s", pending.command, pending.request_id, error)
        self._emitter.emit(EVENT_REQUEST_FAILED, {"error": error})

    def _load_media(self, client: RemoteMediaClient, args: Dict[str, Any]) -> PendingRequest:
        descriptor = MediaDescriptor.from_arguments(args, default_content_type=self._default_content_type)
        request = encode(descriptor)
        self._log.info(
            "LOAD_MEDIA url=%s content_type=%s stream_type=%s",
            descriptor.url,
            descriptor.content_type,
            descriptor.stream_type,
        )
        return self._issue("loadMedia", lambda cb: client.load(request, cb))

    def _seek(self, client: RemoteMediaClient, args: Dict[str, Any]) -> PendingRequest:
        position_ms = int(args["interval"] * 1000)
        if args["relative"]:
            position_ms += int(client.approximate_stream_position())
        return self._issue("seek", lambda cb: client.seek(position_ms, cb))

    def _set_volume(self, client: RemoteMediaClient, args: Dict[str, Any]) -> PendingRequest:
        volume = args["volume"]
        return self._issue("setVolume", lambda cb: client.set_stream_volume(volume, cb))

    def _set_playback_rate(self, client: RemoteMediaClient, args: Dict[str, Any]) -> Optional[PendingRequest]:
        rate = args["rate"]
        if rate is None:
            return None
        return self._issue("setPlaybackRate", lambda cb: client.set_playback_rate(rate, cb))

    def _set_audio_track(self, client: RemoteMediaClient, args: Dict[str, Any]) -> Optional[PendingRequest]:
        return self._select_track(client, "setAudioTrack", TrackCategory.AUDIO, args["lang"])

    def _set_subtitle_track(self, client: RemoteMediaClient, args: Dict[str, Any]) -> Optional[PendingRequest]:
        return self._select_track(client, "setSubtitleTrack", TrackCategory.SUBTITLE, args["lang"])

    def _select_track(
        self,
        client: RemoteMediaClient,
        command: str,
        category: TrackCategory,
        language: Optional[str],
    ) -> Optional[PendingRequest]:
        if language is None:
            return None

        tracks = parse_tracks((client.media_info or {}).get("tracks"))
        status = client.media_status
        active_ids = list(status.active_track_ids) if status is not None else []

        new_ids = select_track(category, language, tracks, active_ids)
        if new_ids is None:
            self._log.debug("TRACK_NOT_FOUND category=%s lang=%s", category.value, language)
            return None

        self._log.info("SET_ACTIVE_TRACKS category=%s lang=%s ids=%s", category.value, language, new_ids)
        return self._issue(command, lambda cb: client.set_active_track_ids(new_ids, cb))

    # ---------------- Queries ----------------
    def _is_playing(self, session: Optional[RemoteSession]) -> bool:
        client = self._client_of(session)
        status = client.media_status if client is not None else None
        return bool(status is not None and status.is_playing)

    def _position(self, session: Optional[RemoteSession]) -> int:
        client = self._client_of(session)
        return int(client.approximate_stream_position()) if client is not None else 0

    def _duration(self, session: Optional[RemoteSession]) -> int:
        client = self._client_of(session)
        return duration_ms(client.media_info) if client is not None else 0

    def _get_media_info(self, session: Optional[RemoteSession]) -> Optional[Dict[str, Any]]:
        client = self._client_of(session)
        descriptor = decode(client.media_info) if client is not None else None
        return descriptor.to_map() if descriptor is not None else None

    def _get_volume(self, session: Optional[RemoteSession]) -> float:
        if session is None:
            return 0.0
        return float(session.volume or 0.0)

    def _get_playback_rate(self, session: Optional[RemoteSession]) -> float:
        client = self._client_of(session)
        status = client.media_status if client is not None else None
        return float(status.playback_rate) if status is not None else 1.0

    def _active_language(self, session: Optional[RemoteSession], category: TrackCategory) -> str:
        client = self._client_of(session)
        if client is None:
            return ""
        status = client.media_status
        if status is None:
            return ""
        tracks = parse_tracks((client.media_info or {}).get("tracks"))
        return active_language(category, tracks, status.active_track_ids)

    # ---------------- Actions ----------------
    def _perform_click(self) -> None:
        if self._button is None:
            self._log.debug("PERFORM_CLICK_NO_BUTTON")
            return
        self._button.perform_click()

    @staticmethod
    def _client_of(session: Optional[RemoteSession]) -> Optional[RemoteMediaClient]:
        if session is None:
            return None
        return session.remote_media_client
