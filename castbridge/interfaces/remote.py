# castbridge/interfaces/remote.py
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Mapping, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from castbridge.model.media import MediaLoadRequest
    from castbridge.model.status import MediaStatusSnapshot


# (success, response) -- same shape as pychromecast's callback_function
RequestCallback = Callable[[bool, Optional[Mapping]], None]


class MediaClientListener(Protocol):
    """Receives media pushes from a remote media client."""
    def on_status_updated(self, status: Optional["MediaStatusSnapshot"]) -> None: ...
    def on_media_error(self, error_code: Optional[int]) -> None: ...


class RemoteMediaClient(Protocol):
    """
    Media control surface of a connected receiver session.

    Every request method is non-blocking: it sends the request and reports
    the outcome later through `callback`.
    """

    @property
    def media_status(self) -> Optional["MediaStatusSnapshot"]: ...

    @property
    def media_info(self) -> Optional[Mapping]: ...

    def approximate_stream_position(self) -> int: ...

    def load(self, request: "MediaLoadRequest", callback: RequestCallback) -> None: ...
    def play(self, callback: RequestCallback) -> None: ...
    def pause(self, callback: RequestCallback) -> None: ...
    def stop(self, callback: RequestCallback) -> None: ...
    def seek(self, position_ms: int, callback: RequestCallback) -> None: ...
    def set_stream_volume(self, volume: float, callback: RequestCallback) -> None: ...
    def set_playback_rate(self, rate: float, callback: RequestCallback) -> None: ...
    def set_active_track_ids(self, track_ids: Sequence[int], callback: RequestCallback) -> None: ...

    def register_listener(self, listener: MediaClientListener) -> None: ...
    def unregister_listener(self, listener: MediaClientListener) -> None: ...


class RemoteSession(Protocol):
    """Opaque handle to a connected receiver session."""

    @property
    def is_connected(self) -> bool: ...

    @property
    def volume(self) -> float: ...

    @property
    def remote_media_client(self) -> Optional[RemoteMediaClient]: ...


class SessionListener(Protocol):
    def on_session_started(self, session: RemoteSession) -> None: ...
    def on_session_ended(self, session: RemoteSession, error: Optional[str]) -> None: ...


class SessionProvider(Protocol):
    """
    Source of the current receiver session.
    Discovery and pairing happen behind this interface.
    """

    @property
    def current_session(self) -> Optional[RemoteSession]: ...

    def add_session_listener(self, listener: SessionListener) -> None: ...
    def remove_session_listener(self, listener: SessionListener) -> None: ...
    def end_current_session(self, stop_casting: bool = True) -> None: ...


class CastButton(Protocol):
    """Platform cast button owned by the host UI."""
    def perform_click(self) -> None: ...
